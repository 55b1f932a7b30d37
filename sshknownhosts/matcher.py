"""
known_hosts parser and host key matcher.

:class:`KnownHosts` reads OpenSSH known_hosts files and provides the host key
callback :meth:`KnownHosts.verify`. The callback returns ``None`` if the
presented key is trusted and raises :class:`~sshknownhosts.exceptions.HostKeyError`
otherwise. The error lists every known_hosts entry that matched the host, so an
empty list means that the host is unknown.

Supported syntax:

* comma separated host patterns with ``*`` and ``?`` wildcards and ``!`` negation
* ``[host]:port`` patterns for non standard ports
* hashed hostnames (``|1|salt|hash``)
* ``@cert-authority`` and ``@revoked`` markers
"""

import base64
import binascii
import hmac
import logging
import os
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Pattern, Tuple, Union

from paramiko import HostKeys, PKey

from sshknownhosts.address import (
    DEFAULT_PORT,
    RemoteAddress,
    address_to_string,
    join_host_port,
    normalize,
    split_host_port,
)
from sshknownhosts.certificates import HostCertificate, is_certificate
from sshknownhosts.exceptions import (
    CertificateError,
    HostKeyError,
    KnownHostsParseError,
    RevokedKeyError,
)
from sshknownhosts.keys import InvalidPublicKey, keys_equal, parse_authorized_key

MARKER_CERT = "@cert-authority"
MARKER_REVOKED = "@revoked"

HASH_MAGIC = "|1|"

FilePath = Union[str, "os.PathLike[str]"]
Address = Tuple[str, str]


def iter_lines(filename: FilePath) -> Iterator[Tuple[int, bytes]]:
    """
    Iterate over the lines of a known_hosts file.

    Lines are counted from 1 and stripped of surrounding whitespace. Every reader of
    known_hosts files in this package uses this iterator, so line numbers always
    refer to the same physical line.
    """
    with open(filename, "rb") as known_hosts_file:
        for line_number, line in enumerate(known_hosts_file, start=1):
            yield line_number, line.strip()


@dataclass(frozen=True)
class KnownKey:
    """A key from a known_hosts file together with its position."""

    key: PKey
    filename: str
    line: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}: {self.key.get_name()} {self.key.get_base64()}"


class HostPattern:
    """Single, possibly negated, entry from a comma separated host list."""

    def __init__(self, pattern: str, negate: bool = False) -> None:
        self.negate = negate
        if pattern.startswith("["):
            host, port = split_host_port(pattern)
        else:
            try:
                host, port = split_host_port(pattern)
            except ValueError:
                host, port = pattern, DEFAULT_PORT
        self.port = port
        self.host_regex: Pattern[str] = re.compile(
            "".join(
                ".*" if char == "*" else "." if char == "?" else re.escape(char)
                for char in host
            ),
            re.IGNORECASE | re.DOTALL,
        )

    def match(self, address: Address) -> bool:
        host, port = address
        return port == self.port and self.host_regex.fullmatch(host) is not None


class HostnameMatcher:
    """Matcher for a plain comma separated host list."""

    def __init__(self, patterns: str) -> None:
        self.patterns: List[HostPattern] = []
        for pattern in patterns.split(","):
            if not pattern:
                continue
            negate = pattern.startswith("!")
            if negate:
                pattern = pattern[1:]
            if not pattern:
                raise ValueError("negation without following hostname")
            self.patterns.append(HostPattern(pattern, negate))

    def match(self, address: Address) -> bool:
        matched = False
        for pattern in self.patterns:
            if not pattern.match(address):
                continue
            if pattern.negate:
                return False
            matched = True
        return matched


class HashedHostMatcher:
    """Matcher for a hashed hostname written by ``ssh-keygen -H``."""

    def __init__(self, encoded: str) -> None:
        components = encoded.split("|")
        if len(components) != 4:
            raise ValueError(f"got {len(components) - 1} hash components, want 3")
        if components[1] != "1":
            raise ValueError(f"got hash type {components[1]}, must be '1'")
        try:
            salt = base64.b64decode(components[2], validate=True)
            digest = base64.b64decode(components[3], validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid hashed host: {exc}") from exc
        # canonical encoding, as returned by HostKeys.hash_host
        self.encoded = HASH_MAGIC + "|".join(
            base64.b64encode(value).decode("ascii") for value in (salt, digest)
        )

    def match(self, address: Address) -> bool:
        hostname = normalize(join_host_port(*address))
        return hmac.compare_digest(
            HostKeys.hash_host(hostname, self.encoded), self.encoded
        )


class KnownHostsLine:
    """Parsed host key line."""

    def __init__(
        self,
        known_key: KnownKey,
        matcher: Union[HostnameMatcher, HashedHostMatcher],
        cert: bool = False,
    ) -> None:
        self.known_key = known_key
        self.matcher = matcher
        self.cert = cert

    def match(self, address: Address) -> bool:
        return self.matcher.match(address)


class KnownHosts:
    """
    Host keys loaded from one or more known_hosts files.

    Instances are not modified after loading and may be shared between threads.
    Use :meth:`load` to create an instance and :meth:`verify` as host key callback.
    """

    def __init__(self) -> None:
        self.lines: List[KnownHostsLine] = []
        self.revoked: List[KnownKey] = []

    @classmethod
    def load(cls, *files: FilePath) -> "KnownHosts":
        """
        Load known_hosts files.

        :param files: paths of the known_hosts files
        :return: the loaded host keys
        :raises OSError: if a file can not be read
        :raises KnownHostsParseError: if a file contains an invalid line
        """
        known_hosts = cls()
        for filename in files:
            known_hosts.read(filename)
        return known_hosts

    def read(self, filename: FilePath) -> None:
        name = os.fspath(filename)
        for line_number, line in iter_lines(filename):
            if not line or line.startswith(b"#"):
                continue
            try:
                self.parse_line(line.decode("utf-8"), name, line_number)
            except (ValueError, InvalidPublicKey) as exc:
                raise KnownHostsParseError(name, line_number, str(exc)) from exc
        logging.debug("loaded known_hosts file %s", name)

    def parse_line(self, line: str, filename: str, line_number: int) -> None:
        marker = None
        if line.startswith("@"):
            fields = line.split(None, 1)
            marker = fields[0]
            if marker not in (MARKER_CERT, MARKER_REVOKED):
                raise ValueError(f"unknown marker {marker}")
            line = fields[1] if len(fields) > 1 else ""

        fields = line.split(None, 1)
        if len(fields) < 2:
            raise ValueError("missing host pattern")
        patterns, key_text = fields
        key, _ = parse_authorized_key(key_text)
        known_key = KnownKey(key, filename, line_number)

        if marker == MARKER_REVOKED:
            self.revoked.append(known_key)
            return

        matcher: Union[HostnameMatcher, HashedHostMatcher]
        if patterns.startswith("|"):
            matcher = HashedHostMatcher(patterns)
        else:
            matcher = HostnameMatcher(patterns)
        self.lines.append(KnownHostsLine(known_key, matcher, cert=marker == MARKER_CERT))

    def find_revoked(self, key: PKey) -> Optional[KnownKey]:
        for revoked in self.revoked:
            if keys_equal(revoked.key, key):
                return revoked
        return None

    def matching_lines(self, address: Address) -> List[KnownHostsLine]:
        return [line for line in self.lines if line.match(address)]

    def is_host_authority(self, authority: PKey, address: Address) -> bool:
        return any(
            line.cert and keys_equal(line.known_key.key, authority)
            for line in self.matching_lines(address)
        )

    @staticmethod
    def host_address(hostname: str, remote: RemoteAddress) -> Address:
        if not hostname:
            hostname = address_to_string(remote)
        try:
            return split_host_port(hostname)
        except ValueError:
            return hostname, DEFAULT_PORT

    def verify(self, hostname: str, remote: RemoteAddress, key: PKey) -> None:
        """
        Check a host key.

        :param hostname: host as passed to the SSH client, ``host``, ``host:port`` or ``[host]:port``
        :param remote: the remote peer address, used when ``hostname`` is empty
        :param key: the key presented by the server
        :raises HostKeyError: if the key is not trusted for this host
        :raises RevokedKeyError: if the key was revoked
        :raises CertificateError: if the presented certificate is not acceptable
        """
        address = self.host_address(hostname, remote)
        if is_certificate(key):
            self.verify_certificate(address, key)
            return

        revoked = self.find_revoked(key)
        if revoked is not None:
            raise RevokedKeyError(revoked)

        matching = self.matching_lines(address)
        for line in matching:
            if not line.cert and keys_equal(line.known_key.key, key):
                return
        raise HostKeyError(want=[line.known_key for line in matching])

    def verify_certificate(self, address: Address, key: PKey) -> None:
        certificate = HostCertificate.from_key(key)
        for checked_key in (certificate.key, certificate.signature_key):
            revoked = self.find_revoked(checked_key)
            if revoked is not None:
                raise RevokedKeyError(revoked)
        if not self.is_host_authority(certificate.signature_key, address):
            raise CertificateError(
                f"knownhosts: no authorities for hostname: {join_host_port(*address)}"
            )
        certificate.check(address[0])

    __call__ = verify
