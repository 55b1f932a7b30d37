"""
SSH client which verifies the server host key against known_hosts files.

The :class:`SSHClient` restricts the host key algorithms offered during key
exchange to the algorithms of the keys already known for the server. This way the
server presents a key that can be verified, even if it has keys of several types.
"""

import logging
from typing import List, Optional, Sequence

import paramiko

from sshknownhosts.address import join_host_port
from sshknownhosts.db import HostKeyDB
from sshknownhosts.exceptions import HostKeyChangedError, KnownHostsError
from sshknownhosts.keys import fingerprint_sha256
from sshknownhosts.verification import HostKeyVerifier, VerificationResult


def supported_host_key_algorithms(algorithms: Sequence[str]) -> List[str]:
    """Filter host key algorithms which paramiko can not negotiate."""
    key_info = paramiko.Transport._key_info  # pylint: disable=protected-access
    return [algorithm for algorithm in algorithms if algorithm in key_info]


class SSHClient:
    """
    The SSH client class, used to connect to a remote host and verify its host key.

    :param host: the hostname or IP address of the remote host
    :param port: the port number to connect to on the remote host
    :param db: the host key database used to look up the host key algorithms
    :param verifier: the host key callback, which classifies the server key
    :param timeout: timeout for the key exchange in seconds
    """

    def __init__(
        self,
        host: str,
        port: int,
        db: HostKeyDB,
        verifier: HostKeyVerifier,
        timeout: Optional[float] = None,
    ) -> None:
        self.host: str = host
        self.port: int = port
        self.db = db
        self.verifier = verifier
        self.timeout = timeout
        self.transport: Optional[paramiko.Transport] = None
        self.result: Optional[VerificationResult] = None
        self.connected: bool = False

    @property
    def address(self) -> str:
        return join_host_port(self.host, self.port)

    def host_key_algorithms(self) -> List[str]:
        algorithms = self.db.host_key_algorithms(self.address)
        supported = supported_host_key_algorithms(algorithms)
        if len(supported) != len(algorithms):
            logging.debug(
                "host key algorithms not supported by paramiko: %s",
                ", ".join(a for a in algorithms if a not in supported),
            )
        return supported

    def connect(self) -> bool:
        """
        Connects to the remote host and verifies the host key.

        A changed host key is always raised as :class:`HostKeyChangedError`.

        :return: True if the host key was accepted, False otherwise
        """
        message = None
        try:
            self.transport = paramiko.Transport((self.host, self.port))
            algorithms = self.host_key_algorithms()
            if algorithms:
                logging.debug("offering host key algorithms: %s", ", ".join(algorithms))
                self.transport.get_security_options().key_types = algorithms
            self.transport.start_client(timeout=self.timeout)

            remotekey = self.transport.get_remote_server_key()
            logging.debug(
                "%s presented %s key %s",
                self.address,
                remotekey.get_name(),
                fingerprint_sha256(remotekey),
            )
            self.result = self.verifier(self.address, self.transport.getpeername(), remotekey)
            self.connected = True
            return True

        except HostKeyChangedError:
            self.close()
            raise
        except paramiko.SSHException:
            message = "general ssh error"
        except KnownHostsError as exc:
            message = str(exc)
        except OSError as exc:
            message = f"connection failed: {exc}"

        logging.error("Host key check failed: %s, Message: %s", self.address, message)
        self.close()
        return False

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()
        self.connected = False
