import base64

import pytest
from paramiko import HostKeys, Message

from conftest import known_hosts_line, make_host_certificate, write_known_hosts
from sshknownhosts.exceptions import (
    CertificateError,
    HostKeyError,
    KnownHostsParseError,
    RevokedKeyError,
)
from sshknownhosts.keys import OpaquePublicKey, keys_equal
from sshknownhosts.matcher import KnownHosts


def load(tmp_path, lines):
    return KnownHosts.load(write_known_hosts(tmp_path / "known_hosts", lines))


def test_trusted_key(tmp_path, ed25519_key):
    known_hosts = load(tmp_path, [known_hosts_line("example.com", ed25519_key)])
    assert known_hosts.verify("example.com:22", None, ed25519_key) is None
    assert known_hosts("example.com", None, ed25519_key) is None


def test_changed_key(tmp_path, ed25519_key, other_ed25519_key):
    known_hosts = load(tmp_path, [known_hosts_line("example.com", ed25519_key)])
    with pytest.raises(HostKeyError) as exc_info:
        known_hosts.verify("example.com:22", None, other_ed25519_key)
    assert len(exc_info.value.want) == 1
    want = exc_info.value.want[0]
    assert keys_equal(want.key, ed25519_key)
    assert want.line == 1
    assert want.filename == str(tmp_path / "known_hosts")


def test_changed_key_type(tmp_path, ed25519_key, ecdsa_key):
    known_hosts = load(tmp_path, [known_hosts_line("example.com", ed25519_key)])
    with pytest.raises(HostKeyError) as exc_info:
        known_hosts.verify("example.com:22", None, ecdsa_key)
    assert [known.key.get_name() for known in exc_info.value.want] == ["ssh-ed25519"]


def test_unknown_host(tmp_path, ed25519_key):
    known_hosts = load(tmp_path, [known_hosts_line("example.com", ed25519_key)])
    with pytest.raises(HostKeyError) as exc_info:
        known_hosts.verify("other.example.com:22", None, ed25519_key)
    assert exc_info.value.want == []


def test_port_patterns(tmp_path, ed25519_key, ecdsa_key):
    known_hosts = load(
        tmp_path,
        [
            known_hosts_line("example.com", ed25519_key),
            known_hosts_line("[example.com]:2222", ecdsa_key),
        ],
    )
    known_hosts.verify("example.com:2222", None, ecdsa_key)
    known_hosts.verify("[example.com]:2222", None, ecdsa_key)
    with pytest.raises(HostKeyError):
        known_hosts.verify("example.com:22", None, ecdsa_key)
    with pytest.raises(HostKeyError):
        known_hosts.verify("example.com:2222", None, ed25519_key)


def test_multiple_hosts_wildcards_and_negation(tmp_path, ed25519_key):
    known_hosts = load(
        tmp_path,
        [known_hosts_line("*.example.com,!bad.example.com,host?.test,192.0.2.1", ed25519_key)],
    )
    known_hosts.verify("www.example.com:22", None, ed25519_key)
    known_hosts.verify("WWW.Example.COM:22", None, ed25519_key)
    known_hosts.verify("host1.test:22", None, ed25519_key)
    known_hosts.verify("192.0.2.1:22", None, ed25519_key)
    for hostname in ("bad.example.com:22", "host12.test:22", "example.com:22"):
        with pytest.raises(HostKeyError) as exc_info:
            known_hosts.verify(hostname, None, ed25519_key)
        assert exc_info.value.want == []


def test_hashed_hosts(tmp_path, ed25519_key, ecdsa_key):
    known_hosts = load(
        tmp_path,
        [
            known_hosts_line(HostKeys.hash_host("example.com"), ed25519_key),
            known_hosts_line(HostKeys.hash_host("[example.com]:2222"), ecdsa_key),
            known_hosts_line(HostKeys.hash_host("::1"), ecdsa_key),
        ],
    )
    known_hosts.verify("example.com:22", None, ed25519_key)
    known_hosts.verify("example.com:2222", None, ecdsa_key)
    known_hosts.verify("[::1]:22", None, ecdsa_key)
    with pytest.raises(HostKeyError):
        known_hosts.verify("example.org:22", None, ed25519_key)


def test_hashed_host_with_fixed_salt(tmp_path, ed25519_key):
    salt = base64.b64encode(b"\x01" * 20).decode()
    hashed = HostKeys.hash_host("[example.com]:2222", salt)
    assert hashed.startswith(f"|1|{salt}|")
    known_hosts = load(tmp_path, [known_hosts_line(hashed, ed25519_key)])
    known_hosts.verify("[example.com]:2222", None, ed25519_key)
    for hostname in ("example.com:22", "example.com:2223", "example.org:2222"):
        with pytest.raises(HostKeyError) as exc_info:
            known_hosts.verify(hostname, None, ed25519_key)
        assert exc_info.value.want == []


def test_remote_address_used_without_hostname(tmp_path, ed25519_key):
    known_hosts = load(tmp_path, [known_hosts_line("192.0.2.1", ed25519_key)])
    known_hosts.verify("", ("192.0.2.1", 22), ed25519_key)


def test_hostname_without_port(tmp_path, ed25519_key):
    known_hosts = load(tmp_path, [known_hosts_line("example.com", ed25519_key)])
    known_hosts.verify("example.com", None, ed25519_key)


def test_comments_and_blank_lines(tmp_path, ed25519_key):
    known_hosts = load(
        tmp_path,
        [
            "# comment",
            "",
            "   ",
            known_hosts_line("example.com", ed25519_key) + " comment for the key",
        ],
    )
    with pytest.raises(HostKeyError) as exc_info:
        known_hosts.verify("example.com:22", None, unknown_type_key())
    assert exc_info.value.want[0].line == 4


def unknown_type_key():
    blob = Message()
    blob.add_string("ssh-unknown")
    blob.add_string(b"data")
    return OpaquePublicKey("ssh-unknown", blob.asbytes())


def test_revoked_key(tmp_path, ed25519_key):
    known_hosts = load(
        tmp_path,
        [
            known_hosts_line("example.com", ed25519_key),
            known_hosts_line("*", ed25519_key, marker="@revoked"),
        ],
    )
    with pytest.raises(RevokedKeyError) as exc_info:
        known_hosts.verify("example.com:22", None, ed25519_key)
    assert exc_info.value.revoked.line == 2


def test_cert_authority_line_is_no_host_key(tmp_path, ca_key):
    known_hosts = load(tmp_path, [known_hosts_line("*.example.com", ca_key, marker="@cert-authority")])
    with pytest.raises(HostKeyError) as exc_info:
        known_hosts.verify("www.example.com:22", None, ca_key)
    assert len(exc_info.value.want) == 1


def test_security_key_types_are_kept(tmp_path):
    blob = Message()
    blob.add_string("sk-ssh-ed25519@openssh.com")
    blob.add_string(b"\x01" * 32)
    blob.add_string("ssh:")
    encoded = base64.b64encode(blob.asbytes()).decode()
    known_hosts = load(tmp_path, [f"example.com sk-ssh-ed25519@openssh.com {encoded}"])
    key = OpaquePublicKey("sk-ssh-ed25519@openssh.com", blob.asbytes())
    known_hosts.verify("example.com:22", None, key)


@pytest.mark.parametrize(
    "content, message",
    [
        ("@unknown example.com ssh-ed25519 AAAA", "unknown marker"),
        ("example.com", "missing host pattern"),
        ("example.com ssh-ed25519", "missing key type or key data"),
        ("example.com ssh-ed25519 !!!notbase64", "invalid base64"),
        ("!,example.com {key}", "negation"),
        ("|1|abc {key}", "hash components"),
        ("|2|YWJj|YWJj {key}", "hash type"),
    ],
)
def test_parse_errors(tmp_path, ed25519_key, content, message):
    key_text = f"{ed25519_key.get_name()} {ed25519_key.get_base64()}"
    path = write_known_hosts(
        tmp_path / "known_hosts", ["# first line", content.format(key=key_text)]
    )
    with pytest.raises(KnownHostsParseError, match=message) as exc_info:
        KnownHosts.load(path)
    assert exc_info.value.line == 2
    assert exc_info.value.filename == path


def test_key_type_mismatch(tmp_path, ed25519_key):
    path = write_known_hosts(
        tmp_path / "known_hosts", [f"example.com ecdsa-sha2-nistp256 {ed25519_key.get_base64()}"]
    )
    with pytest.raises(KnownHostsParseError, match="does not match"):
        KnownHosts.load(path)


def test_missing_file(tmp_path):
    with pytest.raises(OSError):
        KnownHosts.load(tmp_path / "missing")


class TestCertificates:
    def test_trusted_certificate(self, tmp_path, ed25519_key, ca_key):
        known_hosts = load(
            tmp_path, [known_hosts_line("*.example.com", ca_key, marker="@cert-authority")]
        )
        certificate = make_host_certificate(ed25519_key, ca_key, ["www.example.com"])
        known_hosts.verify("www.example.com:22", None, certificate)

    def test_any_principal(self, tmp_path, ed25519_key, ca_key):
        known_hosts = load(
            tmp_path, [known_hosts_line("*", ca_key, marker="@cert-authority")]
        )
        certificate = make_host_certificate(ed25519_key, ca_key, [])
        known_hosts.verify("anything.test:22", None, certificate)

    def test_wrong_principal(self, tmp_path, ed25519_key, ca_key):
        known_hosts = load(
            tmp_path, [known_hosts_line("*.example.com", ca_key, marker="@cert-authority")]
        )
        certificate = make_host_certificate(ed25519_key, ca_key, ["other.example.com"])
        with pytest.raises(CertificateError, match="principal"):
            known_hosts.verify("www.example.com:22", None, certificate)

    def test_no_authority(self, tmp_path, ed25519_key, ca_key, ecdsa_key):
        known_hosts = load(
            tmp_path, [known_hosts_line("*.example.com", ecdsa_key, marker="@cert-authority")]
        )
        certificate = make_host_certificate(ed25519_key, ca_key, ["www.example.com"])
        with pytest.raises(CertificateError, match="no authorities"):
            known_hosts.verify("www.example.com:22", None, certificate)

    def test_authority_for_other_hosts(self, tmp_path, ed25519_key, ca_key):
        known_hosts = load(
            tmp_path, [known_hosts_line("*.example.org", ca_key, marker="@cert-authority")]
        )
        certificate = make_host_certificate(ed25519_key, ca_key, ["www.example.com"])
        with pytest.raises(CertificateError, match="no authorities"):
            known_hosts.verify("www.example.com:22", None, certificate)

    def test_expired(self, tmp_path, ed25519_key, ca_key, now):
        known_hosts = load(tmp_path, [known_hosts_line("*", ca_key, marker="@cert-authority")])
        certificate = make_host_certificate(
            ed25519_key, ca_key, [], valid_after=now - 7200, valid_before=now - 3600
        )
        with pytest.raises(CertificateError, match="expired"):
            known_hosts.verify("www.example.com:22", None, certificate)

    def test_not_yet_valid(self, tmp_path, ed25519_key, ca_key, now):
        known_hosts = load(tmp_path, [known_hosts_line("*", ca_key, marker="@cert-authority")])
        certificate = make_host_certificate(ed25519_key, ca_key, [], valid_after=now + 3600)
        with pytest.raises(CertificateError, match="not yet valid"):
            known_hosts.verify("www.example.com:22", None, certificate)

    def test_user_certificate(self, tmp_path, ed25519_key, ca_key):
        known_hosts = load(tmp_path, [known_hosts_line("*", ca_key, marker="@cert-authority")])
        certificate = make_host_certificate(ed25519_key, ca_key, [], cert_type=1)
        with pytest.raises(CertificateError, match="has type 1"):
            known_hosts.verify("www.example.com:22", None, certificate)

    def test_revoked_host_key(self, tmp_path, ed25519_key, ca_key):
        known_hosts = load(
            tmp_path,
            [
                known_hosts_line("*", ca_key, marker="@cert-authority"),
                known_hosts_line("*", ed25519_key, marker="@revoked"),
            ],
        )
        certificate = make_host_certificate(ed25519_key, ca_key, [])
        with pytest.raises(RevokedKeyError):
            known_hosts.verify("www.example.com:22", None, certificate)
