"""
Shared fixtures: generated keys and helpers to write known_hosts files.
"""

import os
import time
from pathlib import Path
from typing import List, Optional, Sequence

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from paramiko import ECDSAKey, Ed25519Key, Message, PKey, RSAKey

CERT_TIME_INFINITY = 2**64 - 1


def make_ed25519_key() -> Ed25519Key:
    raw = Ed25519PrivateKey.generate().public_key().public_bytes(
        serialization.Encoding.Raw, serialization.PublicFormat.Raw
    )
    msg = Message()
    msg.add_string("ssh-ed25519")
    msg.add_string(raw)
    return Ed25519Key(data=msg.asbytes())


def known_hosts_line(patterns: str, key: PKey, marker: Optional[str] = None) -> str:
    text = f"{patterns} {key.get_name()} {key.get_base64()}"
    if marker:
        text = f"{marker} {text}"
    return text


def write_known_hosts(path: Path, lines: Sequence[str]) -> str:
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return str(path)


def make_host_certificate(
    host_key: Ed25519Key,
    ca_key: PKey,
    principals: List[str],
    *,
    cert_type: int = 2,
    valid_after: int = 0,
    valid_before: int = CERT_TIME_INFINITY,
) -> Ed25519Key:
    """Create an ed25519 host certificate signed by ``ca_key`` and load it like paramiko does."""
    key_msg = Message(host_key.asbytes())
    key_msg.get_text()
    public_bytes = key_msg.get_binary()

    cert = Message()
    cert.add_string("ssh-ed25519-cert-v01@openssh.com")
    cert.add_string(os.urandom(32))
    cert.add_string(public_bytes)
    cert.add_int64(42)
    cert.add_int(cert_type)
    cert.add_string("test host certificate")
    principals_msg = Message()
    for principal in principals:
        principals_msg.add_string(principal)
    cert.add_string(principals_msg.asbytes())
    cert.add_int64(valid_after)
    cert.add_int64(valid_before)
    cert.add_string(b"")  # critical options
    cert.add_string(b"")  # extensions
    cert.add_string(b"")  # reserved
    cert.add_string(ca_key.asbytes())
    signature = ca_key.sign_ssh_data(cert.asbytes())
    cert.add_string(signature.asbytes())
    return Ed25519Key(data=cert.asbytes())


@pytest.fixture(scope="session")
def rsa_key() -> RSAKey:
    return RSAKey.generate(1024)


@pytest.fixture(scope="session")
def ecdsa_key() -> ECDSAKey:
    return ECDSAKey.generate()


@pytest.fixture(scope="session")
def ed25519_key() -> Ed25519Key:
    return make_ed25519_key()


@pytest.fixture(scope="session")
def other_ed25519_key() -> Ed25519Key:
    return make_ed25519_key()


@pytest.fixture(scope="session")
def ca_key() -> ECDSAKey:
    return ECDSAKey.generate()


@pytest.fixture
def now() -> int:
    return int(time.time())
