"""
Public key helpers.

Keys read from known_hosts files are loaded as paramiko keys. Key types which
paramiko can not load (for example security key types like
``sk-ssh-ed25519@openssh.com``) are kept as :class:`OpaquePublicKey`, so they can
still be compared, listed and used to resolve host key algorithms.
"""

import base64
import binascii
import hashlib
from typing import Any, Optional, Tuple

from paramiko import Message, PKey
from paramiko.pkey import UnknownKeyType
from paramiko.ssh_exception import SSHException

from sshknownhosts.exceptions import KnownHostsError

KEY_ALGO_RSA = "ssh-rsa"
KEY_ALGO_RSA_SHA256 = "rsa-sha2-256"
KEY_ALGO_RSA_SHA512 = "rsa-sha2-512"
KEY_ALGO_DSA = "ssh-dss"
KEY_ALGO_ECDSA256 = "ecdsa-sha2-nistp256"
KEY_ALGO_SK_ECDSA256 = "sk-ecdsa-sha2-nistp256@openssh.com"
KEY_ALGO_ECDSA384 = "ecdsa-sha2-nistp384"
KEY_ALGO_ECDSA521 = "ecdsa-sha2-nistp521"
KEY_ALGO_ED25519 = "ssh-ed25519"
KEY_ALGO_SK_ED25519 = "sk-ssh-ed25519@openssh.com"

CERT_SUFFIX = "-cert-v01@openssh.com"


class InvalidPublicKey(KnownHostsError):
    """
    Exception raised when a public key can not be decoded.
    """


class OpaquePublicKey(PKey):
    """
    Public key of a type which paramiko can not load.

    Only the type name and the wire encoding are known, which is enough to compare
    keys and to write them back to a known_hosts file.
    """

    def __init__(self, key_type: str, blob: bytes) -> None:
        super().__init__()
        self.key_type = key_type
        self.blob = blob

    def get_name(self) -> str:
        return self.key_type

    def asbytes(self) -> bytes:
        return self.blob

    def get_bits(self) -> int:
        return 0

    def can_sign(self) -> bool:
        return False

    def verify_ssh_sig(self, data: bytes, msg: Message) -> bool:
        del data, msg
        return False

    @property
    def _fields(self) -> Tuple[str, bytes]:
        return (self.key_type, self.blob)


class PlaceholderKey(PKey):
    """
    Key which is never stored in a known_hosts file.

    Checking this key against a known host always fails with a key mismatch, which
    lists all keys known for that host.
    """

    def get_name(self) -> str:
        return "placeholder-public-key"

    def asbytes(self) -> bytes:
        return b"placeholder public key"

    def get_bits(self) -> int:
        return 0

    def can_sign(self) -> bool:
        return False

    def verify_ssh_sig(self, data: bytes, msg: Message) -> bool:
        del data, msg
        return False

    @property
    def _fields(self) -> Tuple[str, bytes]:
        return (self.get_name(), self.asbytes())


def blob_key_type(blob: bytes) -> str:
    """Read the key type name from the start of a public key blob."""
    try:
        return Message(blob).get_text()
    except UnicodeDecodeError as exc:
        raise InvalidPublicKey("invalid key type in public key blob") from exc


def parse_public_key(key_type: str, blob: bytes) -> PKey:
    """
    Load a public key from its wire encoding.

    :param key_type: key type name as written in front of the key
    :param blob: decoded public key blob
    :return: a paramiko key or an :class:`OpaquePublicKey`
    :raises InvalidPublicKey: if the blob does not contain a key of the given type
    """
    embedded_type = blob_key_type(blob)
    if embedded_type != key_type:
        raise InvalidPublicKey(
            f"key type {key_type} does not match key blob type {embedded_type}"
        )
    try:
        return PKey.from_type_string(key_type, blob)
    except UnknownKeyType:
        return OpaquePublicKey(key_type, blob)
    except (SSHException, ValueError, TypeError) as exc:
        raise InvalidPublicKey(f"invalid {key_type} key: {exc}") from exc


def parse_public_key_blob(blob: bytes) -> PKey:
    """Load a public key from a blob, using the key type stored in the blob."""
    return parse_public_key(blob_key_type(blob), blob)


def parse_authorized_key(text: str) -> Tuple[PKey, Optional[str]]:
    """
    Load a public key from a line in the format ``<type> <base64> [comment]``.

    :param text: key text as found in authorized_keys, known_hosts and .pub files
    :return: tuple of key and comment
    :raises InvalidPublicKey: if the text can not be parsed
    """
    parts = text.strip().split(None, 2)
    if len(parts) < 2:
        raise InvalidPublicKey("missing key type or key data")
    key_type, key_data = parts[0], parts[1]
    comment: Optional[str] = parts[2] if len(parts) == 3 else None
    try:
        key_bytes = base64.b64decode(key_data, validate=True)
    except binascii.Error as exc:
        raise InvalidPublicKey(f"invalid base64 key data: {exc}") from exc
    return parse_public_key(key_type, key_bytes), comment


def keys_equal(first: Any, second: Any) -> bool:
    """Compare two public keys by type and wire encoding."""
    return bool(
        first.get_name() == second.get_name() and first.asbytes() == second.asbytes()
    )


def fingerprint_md5(key: PKey) -> str:
    """Calculate md5 fingerprint.

    For specification, see RFC4716, section 4."""
    fp_plain = hashlib.md5(key.asbytes(), usedforsecurity=False).hexdigest()
    return "MD5:" + ":".join(a + b for a, b in zip(fp_plain[::2], fp_plain[1::2]))


def fingerprint_sha256(key: PKey) -> str:
    """Calculate sha256 fingerprint."""
    fp_plain = hashlib.sha256(key.asbytes()).digest()
    return (b"SHA256:" + base64.b64encode(fp_plain).replace(b"=", b"")).decode(
        "utf-8"
    )
