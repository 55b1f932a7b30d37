"""
known_hosts lookups and host key verification for paramiko.

* :class:`HostKeyDB` looks up known keys and host key algorithms, including
  ``@cert-authority`` lines
* :class:`HostKeyVerifier` rejects changed host keys and can add new hosts
* :func:`write_known_host` appends new known_hosts lines
* :func:`normalize` converts addresses into the form used in known_hosts
"""

from sshknownhosts.address import normalize
from sshknownhosts.db import (
    HostKeyCallback,
    HostKeyDB,
    KnownHostKey,
    host_key_algorithms,
)
from sshknownhosts.exceptions import (
    CertificateError,
    HostKeyChangedError,
    HostKeyError,
    KnownHostsError,
    KnownHostsFormatError,
    KnownHostsIOError,
    KnownHostsParseError,
    MatcherContractError,
    RevokedKeyError,
    UnknownHostError,
)
from sshknownhosts.lines import line, write_known_host
from sshknownhosts.matcher import KnownHosts, KnownKey
from sshknownhosts.verification import (
    HostKeyStatus,
    HostKeyVerifier,
    KnownHostsPolicy,
    VerificationResult,
    check_host_key,
    is_host_key_changed,
    is_host_unknown,
)

__all__ = [
    "CertificateError",
    "HostKeyCallback",
    "HostKeyChangedError",
    "HostKeyDB",
    "HostKeyError",
    "HostKeyStatus",
    "HostKeyVerifier",
    "KnownHostKey",
    "KnownHosts",
    "KnownHostsError",
    "KnownHostsFormatError",
    "KnownHostsIOError",
    "KnownHostsParseError",
    "KnownHostsPolicy",
    "KnownKey",
    "MatcherContractError",
    "RevokedKeyError",
    "UnknownHostError",
    "VerificationResult",
    "check_host_key",
    "host_key_algorithms",
    "is_host_key_changed",
    "is_host_unknown",
    "line",
    "normalize",
    "write_known_host",
]
