"""
Address handling for known_hosts entries.

known_hosts files store hosts on the default port 22 as a bare ``host``, and every
other port as ``[host]:port``. The functions in this module convert between the
different notations so lookups and newly written entries use the same text.
"""

from typing import Any, Tuple, Union

DEFAULT_PORT = "22"
ZERO_ADDRESS = "0.0.0.0:0"

RemoteAddress = Union[None, str, Tuple[Any, ...]]


def split_host_port(hostport: str) -> Tuple[str, str]:
    """
    Split ``host:port``, ``[host]:port`` or ``[ipv6]:port`` into host and port.

    Brackets are removed from the host. The port is returned as string and may be empty.

    :param hostport: address to split
    :return: tuple of host and port
    :raises ValueError: if the address has no port or is malformed
    """
    last_colon = hostport.rfind(":")
    if last_colon < 0:
        raise ValueError(f"missing port in address: {hostport}")

    host_start, host_end = 0, 0
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address: {hostport}")
        if end + 1 == len(hostport):
            raise ValueError(f"missing port in address: {hostport}")
        if end + 1 != last_colon:
            if hostport[end + 1] == ":":
                raise ValueError(f"too many colons in address: {hostport}")
            raise ValueError(f"missing port in address: {hostport}")
        host = hostport[1:end]
        host_start, host_end = 1, end + 1
    else:
        host = hostport[:last_colon]
        if ":" in host:
            raise ValueError(f"too many colons in address: {hostport}")

    if "[" in hostport[host_start:]:
        raise ValueError(f"unexpected '[' in address: {hostport}")
    if "]" in hostport[host_end:]:
        raise ValueError(f"unexpected ']' in address: {hostport}")
    return host, hostport[last_colon + 1 :]


def join_host_port(host: str, port: Union[int, str]) -> str:
    """Combine host and port, adding brackets around ipv6 addresses."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def address_to_string(remote: RemoteAddress) -> str:
    """
    Render a remote peer address as ``host:port``.

    :param remote: ``(host, port)`` tuple as returned by ``socket.getpeername()``,
        an already formatted string or ``None`` for an unknown peer
    :return: the address as string
    """
    if remote is None:
        return ZERO_ADDRESS
    if isinstance(remote, str):
        return remote
    return join_host_port(str(remote[0]), remote[1])


def normalize(address: str) -> str:
    """
    Normalize an address into the form used in known_hosts.

    The default port 22 is omitted. Other ports are written as ``[host]:port``.
    Brackets around ipv6 addresses on the default port are removed, which is
    how OpenSSH writes them.

    This function never raises. Addresses which can not be split are treated as
    host without a port.

    :param address: ``host``, ``host:port`` or ``[host]:port``
    :return: normalized address
    """
    try:
        host, port = split_host_port(address)
    except ValueError:
        host, port = address, DEFAULT_PORT

    if port != DEFAULT_PORT:
        return f"[{host}]:{port}"
    if host.startswith("[") and host.endswith("]"):
        return host[1:-1]
    return host
