"""
Host key database with support for ``@cert-authority`` lines.

:class:`HostKeyDB` wraps the host key callback of a :class:`~sshknownhosts.matcher.KnownHosts`
instance and reads the known_hosts files one additional time to find out which
lines are certificate authority lines. This allows to look up the keys and host
key algorithms of a known host, which can be used to restrict the host key
algorithms offered during key exchange to the ones that can be verified.

:class:`HostKeyCallback` provides the same lookups without the additional read.
Certificate authority lines look like normal host keys to it.
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from paramiko import PKey

from sshknownhosts.address import RemoteAddress
from sshknownhosts.exceptions import (
    HostKeyError,
    KnownHostsIOError,
    MatcherContractError,
)
from sshknownhosts.keys import (
    KEY_ALGO_DSA,
    KEY_ALGO_ECDSA256,
    KEY_ALGO_ECDSA384,
    KEY_ALGO_ECDSA521,
    KEY_ALGO_ED25519,
    KEY_ALGO_RSA,
    KEY_ALGO_RSA_SHA256,
    KEY_ALGO_RSA_SHA512,
    KEY_ALGO_SK_ECDSA256,
    KEY_ALGO_SK_ED25519,
    PlaceholderKey,
)
from sshknownhosts.matcher import FilePath, KnownHosts, KnownKey, iter_lines

HostKeyCallbackType = Callable[[str, RemoteAddress, PKey], None]

PLACEHOLDER_REMOTE = ("0.0.0.0", 0)  # nosec

CERT_AUTHORITY_PREFIX = b"@cert-authority"

CERT_ALGORITHMS: Dict[str, str] = {
    KEY_ALGO_RSA: "ssh-rsa-cert-v01@openssh.com",
    KEY_ALGO_RSA_SHA256: "rsa-sha2-256-cert-v01@openssh.com",
    KEY_ALGO_RSA_SHA512: "rsa-sha2-512-cert-v01@openssh.com",
    KEY_ALGO_DSA: "ssh-dss-cert-v01@openssh.com",
    KEY_ALGO_ECDSA256: "ecdsa-sha2-nistp256-cert-v01@openssh.com",
    KEY_ALGO_SK_ECDSA256: "sk-ecdsa-sha2-nistp256-cert-v01@openssh.com",
    KEY_ALGO_ECDSA384: "ecdsa-sha2-nistp384-cert-v01@openssh.com",
    KEY_ALGO_ECDSA521: "ecdsa-sha2-nistp521-cert-v01@openssh.com",
    KEY_ALGO_ED25519: "ssh-ed25519-cert-v01@openssh.com",
    KEY_ALGO_SK_ED25519: "sk-ssh-ed25519-cert-v01@openssh.com",
}


@dataclass(frozen=True)
class KnownHostKey:
    """A known key of a host with its position, flagged if it comes from a @cert-authority line."""

    key: PKey
    cert: bool = False
    filename: str = ""
    line: int = 0

    def get_name(self) -> str:
        return self.key.get_name()


def is_cert_authority_line(line: bytes) -> bool:
    """Check if a stripped known_hosts line starts with ``@cert-authority`` followed by whitespace."""
    prefix_length = len(CERT_AUTHORITY_PREFIX)
    return (
        len(line) > prefix_length
        and line.startswith(CERT_AUTHORITY_PREFIX)
        and line[prefix_length : prefix_length + 1] in (b" ", b"\t")
    )


def scan_cert_authority_lines(*files: FilePath) -> FrozenSet[Tuple[str, int]]:
    """
    Find the positions of all ``@cert-authority`` lines.

    :param files: known_hosts files to scan
    :return: set of ``(filename, line number)`` tuples
    :raises KnownHostsIOError: if a file can not be read
    """
    positions = set()
    for filename in files:
        name = os.fspath(filename)
        line_number = 0
        try:
            for line_number, line in iter_lines(filename):
                if is_cert_authority_line(line):
                    positions.add((name, line_number))
        except OSError as exc:
            raise KnownHostsIOError(
                f"knownhosts: {name}:{line_number}: {exc.strerror or exc}"
            ) from exc
    return frozenset(positions)


def key_type_to_cert_algorithm(key_type: str) -> Optional[str]:
    """Return the certificate algorithm for a key type or ``None`` if there is none."""
    return CERT_ALGORITHMS.get(key_type)


class HostKeyDB:
    """
    Host key database which knows about ``@cert-authority`` lines.

    :param callback: host key callback, usually :meth:`KnownHosts.verify`
    :param cert_lines: positions of all ``@cert-authority`` lines. If empty, all
        keys are reported as normal host keys.
    """

    def __init__(
        self,
        callback: HostKeyCallbackType,
        cert_lines: Optional[FrozenSet[Tuple[str, int]]] = None,
    ) -> None:
        self.callback = callback
        self.cert_lines: FrozenSet[Tuple[str, int]] = cert_lines or frozenset()

    @classmethod
    def load(cls, *files: FilePath) -> "HostKeyDB":
        """
        Create a database from OpenSSH known_hosts files.

        The order of the files does not matter.

        :raises OSError: if a file can not be read
        :raises KnownHostsParseError: if a file contains an invalid line
        """
        known_hosts = KnownHosts.load(*files)
        cert_lines = scan_cert_authority_lines(*files)
        logging.debug(
            "loaded %d known_hosts files with %d @cert-authority lines",
            len(files),
            len(cert_lines),
        )
        return cls(known_hosts.verify, cert_lines)

    def host_key_callback(self) -> HostKeyCallbackType:
        return self.callback

    def host_keys(self, host_with_port: str) -> List[KnownHostKey]:
        """
        Return the known keys for ``host_with_port``.

        The keys are sorted by known_hosts filename and line number. The list is
        empty if the host is unknown.

        :raises MatcherContractError: if the callback did not answer with a key mismatch
        """
        try:
            self.callback(host_with_port, PLACEHOLDER_REMOTE, PlaceholderKey())
        except HostKeyError as exc:
            known_keys = sorted(exc.want, key=lambda k: (k.filename, k.line))
        except Exception as exc:  # pylint: disable=broad-exception-caught # noqa: BLE001
            raise MatcherContractError(
                f"unexpected result from host key callback for {host_with_port}: {exc!r}"
            ) from exc
        else:
            return []
        return [
            KnownHostKey(
                known_key.key,
                self.is_cert(known_key),
                filename=known_key.filename,
                line=known_key.line,
            )
            for known_key in known_keys
        ]

    def is_cert(self, known_key: KnownKey) -> bool:
        if not self.cert_lines:
            return False
        return (known_key.filename, known_key.line) in self.cert_lines

    def host_key_algorithms(self, host_with_port: str) -> List[str]:
        """
        Return the host key algorithms for ``host_with_port``.

        The result can be used to restrict the host key algorithms offered during
        key exchange. RSA keys produce ``rsa-sha2-512`` and ``rsa-sha2-256`` in front of
        ``ssh-rsa``. Keys from ``@cert-authority`` lines produce the matching
        certificate algorithms. Every algorithm is returned once.
        """
        algorithms: List[str] = []

        def add_algorithm(key_type: str, cert: bool) -> None:
            algorithm: Optional[str] = key_type
            if cert:
                algorithm = key_type_to_cert_algorithm(key_type)
                if algorithm is None:
                    logging.warning(
                        "no certificate algorithm for %s keys, skipping @cert-authority key for %s",
                        key_type,
                        host_with_port,
                    )
                    return
            if algorithm not in algorithms:
                algorithms.append(algorithm)

        for host_key in self.host_keys(host_with_port):
            key_type = host_key.get_name()
            if key_type == KEY_ALGO_RSA:
                # rsa-sha2-* are signature algorithms of ssh-rsa keys, see RFC 8332, section 2
                add_algorithm(KEY_ALGO_RSA_SHA512, host_key.cert)
                add_algorithm(KEY_ALGO_RSA_SHA256, host_key.cert)
            add_algorithm(key_type, host_key.cert)
        return algorithms


class HostKeyCallback:
    """
    Host key callback with lookups of known keys and host key algorithms.

    ``@cert-authority`` lines are reported as normal host keys. Use :class:`HostKeyDB`
    when certificate authorities must be distinguished.
    """

    def __init__(self, callback: HostKeyCallbackType) -> None:
        self.callback = callback

    @classmethod
    def load(cls, *files: FilePath) -> "HostKeyCallback":
        return cls(KnownHosts.load(*files).verify)

    def __call__(self, hostname: str, remote: RemoteAddress, key: PKey) -> None:
        self.callback(hostname, remote, key)

    def host_key_callback(self) -> HostKeyCallbackType:
        return self.callback

    def host_keys(self, host_with_port: str) -> List[PKey]:
        return [host_key.key for host_key in HostKeyDB(self.callback).host_keys(host_with_port)]

    def host_key_algorithms(self, host_with_port: str) -> List[str]:
        return HostKeyDB(self.callback).host_key_algorithms(host_with_port)


def host_key_algorithms(callback: HostKeyCallbackType, host_with_port: str) -> List[str]:
    """Look up host key algorithms for any host key callback, without certificate algorithms."""
    return HostKeyCallback(callback).host_key_algorithms(host_with_port)
