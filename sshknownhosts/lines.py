"""
Writing of known_hosts lines.

Lines are written in the format ``addresses key-type base64-key``. All addresses
are normalized, so a :class:`~sshknownhosts.db.HostKeyDB` loaded from the file
finds the written key again. ``@cert-authority`` lines are never written.
"""

import io
from typing import IO, Any, Iterable

from paramiko import PKey

from sshknownhosts.address import RemoteAddress, address_to_string, normalize
from sshknownhosts.exceptions import KnownHostsFormatError

ZERO_ADDRESS_NORMALIZED = "[0.0.0.0]:0"


def contains_whitespace(text: str) -> bool:
    return " " in text or "\t" in text


def line(addresses: Iterable[str], key: PKey) -> str:
    """
    Create a known_hosts line without trailing newline.

    :param addresses: host addresses, which are normalized before they are written
    :param key: the host key
    :return: the known_hosts line
    """
    return " ".join(
        [
            ",".join(normalize(address) for address in addresses),
            key.get_name(),
            key.get_base64(),
        ]
    )


def write_known_host(
    writer: IO[Any], hostname: str, remote: RemoteAddress, key: PKey
) -> None:
    """
    Write a known_hosts line for a new host to ``writer``.

    The line always contains the hostname. The remote address is added, if it is
    known and normalizes to another address than the hostname.

    :param writer: file like object, usually a known_hosts file opened for appending.
        Text streams (:class:`io.TextIOBase`) receive ``str``, all other writers ``bytes``.
    :param hostname: host name as passed to the host key callback
    :param remote: the remote peer address
    :param key: the host key presented by the server
    :raises KnownHostsFormatError: if the hostname contains whitespace
    :raises OSError: if writing fails
    """
    hostname_normalized = normalize(hostname)
    if contains_whitespace(hostname_normalized):
        raise KnownHostsFormatError(
            f"knownhosts: hostname '{hostname_normalized}' contains spaces"
        )
    addresses = [hostname_normalized]
    remote_normalized = normalize(address_to_string(remote))
    if (
        remote_normalized != ZERO_ADDRESS_NORMALIZED
        and remote_normalized != hostname_normalized
        and not contains_whitespace(remote_normalized)
    ):
        addresses.append(remote_normalized)

    known_hosts_line = line(addresses, key) + "\n"
    if isinstance(writer, io.TextIOBase):
        writer.write(known_hosts_line)
    else:
        writer.write(known_hosts_line.encode("utf-8"))
