"""
Classification of host key callback results.

A host key callback answers with one of three outcomes:

* the key is trusted,
* the host is known, but the presented key is not one of its keys (the key has changed),
* the host is unknown.

A changed key may indicate a man in the middle attack and is always reported as
:class:`~sshknownhosts.exceptions.HostKeyChangedError`. How unknown hosts are
handled is up to the application. :class:`HostKeyVerifier` either rejects them
or adds them to a known_hosts file (trust on first use).
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

import paramiko
from paramiko import PKey

from sshknownhosts.address import RemoteAddress, normalize
from sshknownhosts.exceptions import (
    HostKeyChangedError,
    HostKeyError,
    UnknownHostError,
)
from sshknownhosts.keys import fingerprint_sha256
from sshknownhosts.lines import write_known_host
from sshknownhosts.logger import Colors
from sshknownhosts.matcher import FilePath, KnownKey

if TYPE_CHECKING:
    from sshknownhosts.db import HostKeyCallbackType


class HostKeyStatus(Enum):
    """
    Outcome of a host key check.
    """

    TRUSTED = "trusted"
    CHANGED = "changed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class VerificationResult:
    status: HostKeyStatus
    want: List[KnownKey] = field(default_factory=list)


def is_host_key_changed(exc: BaseException) -> bool:
    """Check if the error of a host key callback means that the host key has changed."""
    return isinstance(exc, HostKeyError) and len(exc.want) > 0


def is_host_unknown(exc: BaseException) -> bool:
    """Check if the error of a host key callback means that the host is unknown."""
    return isinstance(exc, HostKeyError) and len(exc.want) == 0


def check_host_key(
    callback: "HostKeyCallbackType", hostname: str, remote: RemoteAddress, key: PKey
) -> VerificationResult:
    """
    Run a host key callback and classify the result.

    Errors which are neither a key mismatch nor an unknown host, e.g. revoked keys
    or invalid certificates, are raised unchanged.
    """
    try:
        callback(hostname, remote, key)
    except HostKeyError as exc:
        if is_host_key_changed(exc):
            return VerificationResult(HostKeyStatus.CHANGED, exc.want)
        return VerificationResult(HostKeyStatus.UNKNOWN)
    return VerificationResult(HostKeyStatus.TRUSTED)


class HostKeyVerifier:
    """
    Host key callback which rejects changed keys and optionally accepts new hosts.

    :param callback: inner host key callback
    :param known_hosts_file: file to which new hosts are appended
    :param accept_new: accept unknown hosts and append them to ``known_hosts_file``
    """

    def __init__(
        self,
        callback: "HostKeyCallbackType",
        known_hosts_file: Optional[FilePath] = None,
        accept_new: bool = False,
    ) -> None:
        self.callback = callback
        self.known_hosts_file = known_hosts_file
        self.accept_new = accept_new

    def __call__(self, hostname: str, remote: RemoteAddress, key: PKey) -> VerificationResult:
        result = check_host_key(self.callback, hostname, remote, key)
        if result.status is HostKeyStatus.TRUSTED:
            logging.debug("host key for %s is trusted", hostname)
            return result

        if result.status is HostKeyStatus.CHANGED:
            logging.error(
                "%s %s",
                Colors.emoji("warning"),
                Colors.stylize(
                    f"REMOTE HOST IDENTIFICATION HAS CHANGED for host {normalize(hostname)}!",
                    "red",
                ),
            )
            for known_key in result.want:
                logging.error("known key: %s", known_key)
            logging.error(
                "presented %s key: %s", key.get_name(), fingerprint_sha256(key)
            )
            raise HostKeyChangedError(
                result.want,
                f"REMOTE HOST IDENTIFICATION HAS CHANGED for host {hostname}! This may indicate a MitM attack.",
            )

        if not self.accept_new or self.known_hosts_file is None:
            raise UnknownHostError(message=f"knownhosts: host {hostname} is unknown")

        with open(self.known_hosts_file, "a", encoding="utf-8") as known_hosts:
            write_known_host(known_hosts, hostname, remote, key)
        logging.info(
            "Added host %s (%s %s) to %s",
            normalize(hostname),
            key.get_name(),
            fingerprint_sha256(key),
            os.fspath(self.known_hosts_file),
        )
        return result


class KnownHostsPolicy(paramiko.MissingHostKeyPolicy):
    """
    Missing host key policy for :class:`paramiko.SSHClient`, which verifies all host keys
    with a :class:`HostKeyVerifier`.

    The SSHClient must not load its own host keys, so every connection is passed to this policy.
    """

    def __init__(self, verifier: HostKeyVerifier) -> None:
        self.verifier = verifier

    def missing_host_key(self, client: paramiko.SSHClient, hostname: str, key: PKey) -> None:
        transport = client.get_transport()
        remote = transport.getpeername() if transport is not None else None
        self.verifier(hostname, remote, key)
