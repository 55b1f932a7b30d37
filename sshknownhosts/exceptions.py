from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from sshknownhosts.matcher import KnownKey


class KnownHostsError(Exception):
    """
    Base class for all errors raised by sshknownhosts.
    """


class KnownHostsParseError(KnownHostsError):
    """
    Exception raised when a known_hosts line can not be parsed.

    :param filename: file which contains the malformed line
    :param line: 1-based line number
    :param message: reason why the line was rejected
    """

    def __init__(self, filename: str, line: int, message: str) -> None:
        super().__init__(f"knownhosts: {filename}:{line}: {message}")
        self.filename = filename
        self.line = line
        self.message = message


class KnownHostsIOError(KnownHostsError, OSError):
    """
    Exception raised when a known_hosts file can not be read while scanning for
    @cert-authority lines.
    """


class KnownHostsFormatError(KnownHostsError, ValueError):
    """
    Exception raised when an address can not be encoded in a known_hosts line.
    """


class HostKeyError(KnownHostsError):
    """
    Exception raised when the presented key does not match any known key for a host.

    ``want`` lists every known_hosts entry which matched the host. When it is
    empty, the host is not known at all.
    """

    def __init__(self, want: Optional[List["KnownKey"]] = None, message: Optional[str] = None) -> None:
        self.want: List["KnownKey"] = list(want or [])
        if message is None:
            if self.want:
                message = "knownhosts: key mismatch"
            else:
                message = "knownhosts: key is unknown"
        super().__init__(message)


class HostKeyChangedError(HostKeyError):
    """
    Exception raised when the host key of a known host has changed.

    This error must never be ignored, because it may indicate a man in the middle attack.
    """


class UnknownHostError(HostKeyError):
    """
    Exception raised when a host has no entry in any known_hosts file.
    """


class RevokedKeyError(KnownHostsError):
    """
    Exception raised when the presented key is marked as @revoked.
    """

    def __init__(self, revoked: "KnownKey") -> None:
        super().__init__(
            f"knownhosts: key is revoked ({revoked.filename}:{revoked.line})"
        )
        self.revoked = revoked


class CertificateError(KnownHostsError):
    """
    Exception raised when a host certificate is not acceptable.
    """


class MatcherContractError(KnownHostsError):
    """
    Exception raised when the host key callback answered with an unexpected result.
    """
