import base64

import pytest
from paramiko import Ed25519Key, Message

from sshknownhosts.keys import (
    InvalidPublicKey,
    OpaquePublicKey,
    PlaceholderKey,
    fingerprint_md5,
    fingerprint_sha256,
    keys_equal,
    parse_authorized_key,
    parse_public_key,
)


def sk_ed25519_blob():
    blob = Message()
    blob.add_string("sk-ssh-ed25519@openssh.com")
    blob.add_string(b"\x02" * 32)
    blob.add_string("ssh:")
    return blob.asbytes()


def test_unknown_key_type_is_kept():
    key = parse_public_key("sk-ssh-ed25519@openssh.com", sk_ed25519_blob())
    assert isinstance(key, OpaquePublicKey)
    assert key.get_name() == "sk-ssh-ed25519@openssh.com"
    assert key.asbytes() == sk_ed25519_blob()


def test_known_key_type(ed25519_key):
    key = parse_public_key("ssh-ed25519", ed25519_key.asbytes())
    assert isinstance(key, Ed25519Key)
    assert keys_equal(key, ed25519_key)


def test_key_type_mismatch(ed25519_key):
    with pytest.raises(InvalidPublicKey, match="does not match"):
        parse_public_key("ssh-rsa", ed25519_key.asbytes())


def test_parse_authorized_key(ed25519_key):
    key, comment = parse_authorized_key(
        f"ssh-ed25519 {ed25519_key.get_base64()} root@example.com\n"
    )
    assert keys_equal(key, ed25519_key)
    assert comment == "root@example.com"

    key, comment = parse_authorized_key(
        "sk-ssh-ed25519@openssh.com " + base64.b64encode(sk_ed25519_blob()).decode()
    )
    assert isinstance(key, OpaquePublicKey)
    assert comment is None


def test_placeholder_key_never_equals_stored_keys(ed25519_key):
    placeholder = PlaceholderKey()
    assert placeholder.get_name() == "placeholder-public-key"
    assert placeholder.asbytes() == b"placeholder public key"
    assert not placeholder.verify_ssh_sig(b"data", Message())
    assert not keys_equal(placeholder, ed25519_key)


def test_fingerprints(ed25519_key):
    assert fingerprint_sha256(ed25519_key).startswith("SHA256:")
    assert "=" not in fingerprint_sha256(ed25519_key)
    md5 = fingerprint_md5(ed25519_key)
    assert md5.startswith("MD5:")
    assert len(md5.split(":")) == 17
