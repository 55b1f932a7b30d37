"""
OpenSSH host certificates.

paramiko loads a host certificate presented during key exchange into the
``public_blob`` attribute of the server key. This module decodes that blob
(see PROTOCOL.certkeys in the OpenSSH sources) and checks it against the
certificate authority key found on a ``@cert-authority`` line.
"""

import logging
import time
from typing import Dict, List, Optional

from paramiko import Message, PKey

from sshknownhosts.exceptions import CertificateError
from sshknownhosts.keys import (
    CERT_SUFFIX,
    KEY_ALGO_DSA,
    KEY_ALGO_ECDSA256,
    KEY_ALGO_ECDSA384,
    KEY_ALGO_ECDSA521,
    KEY_ALGO_ED25519,
    KEY_ALGO_RSA,
    KEY_ALGO_SK_ECDSA256,
    KEY_ALGO_SK_ED25519,
    InvalidPublicKey,
    parse_public_key,
    parse_public_key_blob,
)

USER_CERT = 1
HOST_CERT = 2
CERT_TIME_INFINITY = 2**64 - 1

# number of key specific fields between nonce and serial
CERT_KEY_FIELDS: Dict[str, int] = {
    KEY_ALGO_RSA: 2,
    KEY_ALGO_DSA: 4,
    KEY_ALGO_ECDSA256: 2,
    KEY_ALGO_ECDSA384: 2,
    KEY_ALGO_ECDSA521: 2,
    KEY_ALGO_SK_ECDSA256: 3,
    KEY_ALGO_ED25519: 1,
    KEY_ALGO_SK_ED25519: 2,
}


def is_certificate(key: PKey) -> bool:
    """Check if paramiko loaded the key from an OpenSSH certificate."""
    public_blob = getattr(key, "public_blob", None)
    return public_blob is not None and public_blob.key_type.endswith(CERT_SUFFIX)


class HostCertificate:
    """
    Decoded OpenSSH certificate.

    :param cert_type_name: certificate algorithm, e.g. ``ssh-ed25519-cert-v01@openssh.com``
    :param key: the certified public key
    :param signature_key: the certificate authority key which signed the certificate
    :param signed_data: the part of the certificate covered by the signature
    :param signature: the signature blob
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        cert_type_name: str,
        nonce: bytes,
        key: PKey,
        serial: int,
        cert_type: int,
        key_id: str,
        valid_principals: List[str],
        valid_after: int,
        valid_before: int,
        critical_options: Dict[str, bytes],
        extensions: Dict[str, bytes],
        signature_key: PKey,
        signed_data: bytes,
        signature: bytes,
    ) -> None:
        self.cert_type_name = cert_type_name
        self.nonce = nonce
        self.key = key
        self.serial = serial
        self.cert_type = cert_type
        self.key_id = key_id
        self.valid_principals = valid_principals
        self.valid_after = valid_after
        self.valid_before = valid_before
        self.critical_options = critical_options
        self.extensions = extensions
        self.signature_key = signature_key
        self.signed_data = signed_data
        self.signature = signature

    @classmethod
    def from_key(cls, key: PKey) -> "HostCertificate":
        if not is_certificate(key):
            raise CertificateError("key does not contain a certificate")
        return cls.from_blob(key.public_blob.key_blob)  # type: ignore[union-attr]

    @classmethod
    def from_blob(cls, blob: bytes) -> "HostCertificate":
        """
        Decode a certificate from its wire encoding.

        :param blob: certificate blob
        :return: the decoded certificate
        :raises CertificateError: if the blob is not a supported certificate
        """
        msg = Message(blob)
        try:
            cert_type_name = msg.get_text()
        except UnicodeDecodeError as exc:
            raise CertificateError("invalid certificate type") from exc
        if not cert_type_name.endswith(CERT_SUFFIX):
            raise CertificateError(f"{cert_type_name} is not a certificate")
        key_type = cert_type_name[: -len(CERT_SUFFIX)]
        if key_type not in CERT_KEY_FIELDS:
            raise CertificateError(f"unsupported certificate type {cert_type_name}")

        nonce = msg.get_binary()
        key_msg = Message()
        key_msg.add_string(key_type)
        for _ in range(CERT_KEY_FIELDS[key_type]):
            key_msg.add_string(msg.get_binary())

        try:
            serial = msg.get_int64()
            cert_type = msg.get_int()
            key_id = msg.get_text()
            valid_principals = cls._parse_strings(msg.get_binary())
            valid_after = msg.get_int64()
            valid_before = msg.get_int64()
            critical_options = cls._parse_options(msg.get_binary())
            extensions = cls._parse_options(msg.get_binary())
            msg.get_binary()  # reserved
            signature_key_blob = msg.get_binary()
            signed_data = msg.get_so_far()
            signature = msg.get_binary()
            key = parse_public_key(key_type, key_msg.asbytes())
            signature_key = parse_public_key_blob(signature_key_blob)
        except (UnicodeDecodeError, InvalidPublicKey) as exc:
            raise CertificateError(f"malformed certificate: {exc}") from exc

        return cls(
            cert_type_name=cert_type_name,
            nonce=nonce,
            key=key,
            serial=serial,
            cert_type=cert_type,
            key_id=key_id,
            valid_principals=valid_principals,
            valid_after=valid_after,
            valid_before=valid_before,
            critical_options=critical_options,
            extensions=extensions,
            signature_key=signature_key,
            signed_data=signed_data,
            signature=signature,
        )

    @staticmethod
    def _parse_strings(data: bytes) -> List[str]:
        msg = Message(data)
        values = []
        while msg.get_remainder():
            values.append(msg.get_text())
        return values

    @staticmethod
    def _parse_options(data: bytes) -> Dict[str, bytes]:
        msg = Message(data)
        options = {}
        while msg.get_remainder():
            name = msg.get_text()
            options[name] = msg.get_binary()
        return options

    def check(self, principal: str, now: Optional[int] = None) -> None:
        """
        Check that the certificate is a valid host certificate for ``principal``.

        :param principal: hostname without port
        :param now: unix time used to check the validity period
        :raises CertificateError: if the certificate must not be accepted
        """
        if self.cert_type != HOST_CERT:
            raise CertificateError(
                f"certificate presented as a host key has type {self.cert_type}"
            )
        if self.valid_principals and principal not in self.valid_principals:
            raise CertificateError(
                f"principal {principal!r} not in the set of valid principals for given certificate: {self.valid_principals}"
            )
        if self.critical_options:
            raise CertificateError(
                f"unsupported critical options: {', '.join(self.critical_options)}"
            )
        if now is None:
            now = int(time.time())
        if now < self.valid_after:
            raise CertificateError("certificate is not yet valid")
        if self.valid_before != CERT_TIME_INFINITY and now >= self.valid_before:
            raise CertificateError("certificate has expired")
        if not self.signature_key.verify_ssh_sig(self.signed_data, Message(self.signature)):
            raise CertificateError("certificate signature does not verify")
        logging.debug(
            "certificate %s (serial %d) for %s is valid", self.key_id, self.serial, principal
        )
