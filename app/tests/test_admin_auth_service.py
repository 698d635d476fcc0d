import pytest

from app.services import admin_auth_service
from app.services.admin_auth_service import AdminAuthResult, check_admin_secret, extract_admin_secret


def test_matching_secret_is_authorized():
    assert check_admin_secret("s3cr3t", "s3cr3t") is AdminAuthResult.AUTHORIZED


@pytest.mark.parametrize("candidate", ["wrong", "s3cr3T", "s3cr3", "s3cr3tt", "", None])
def test_other_secrets_are_rejected(candidate):
    assert check_admin_secret(candidate, "s3cr3t") is AdminAuthResult.UNAUTHORIZED


@pytest.mark.parametrize("configured", [None, ""])
def test_unset_server_secret_is_misconfigured(configured):
    assert check_admin_secret("anything", configured) is AdminAuthResult.MISCONFIGURED
    assert check_admin_secret("", configured) is AdminAuthResult.MISCONFIGURED


def test_non_ascii_secret_compares_bytes():
    assert check_admin_secret("pässwörd", "pässwörd") is AdminAuthResult.AUTHORIZED
    # same character count, different byte length
    assert check_admin_secret("passwort", "pässwört") is AdminAuthResult.UNAUTHORIZED


def test_equal_length_goes_through_constant_time_compare(monkeypatch):
    calls = []

    def compare_digest(a, b):
        calls.append((a, b))
        return a == b

    monkeypatch.setattr(admin_auth_service.hmac, "compare_digest", compare_digest)

    assert check_admin_secret("s3cr3x", "s3cr3t") is AdminAuthResult.UNAUTHORIZED
    assert check_admin_secret("x3cr3t", "s3cr3t") is AdminAuthResult.UNAUTHORIZED
    assert calls == [(b"s3cr3t", b"s3cr3x"), (b"s3cr3t", b"x3cr3t")]


def test_length_mismatch_skips_compare(monkeypatch):
    def compare_digest(a, b):
        raise AssertionError("should not be called")

    monkeypatch.setattr(admin_auth_service.hmac, "compare_digest", compare_digest)
    assert check_admin_secret("short", "s3cr3t") is AdminAuthResult.UNAUTHORIZED


def test_header_takes_precedence():
    assert extract_admin_secret("from-header", "from-body") == "from-header"
    assert extract_admin_secret("", "from-body") == ""
    assert extract_admin_secret(None, "from-body") == "from-body"
    assert extract_admin_secret(None, None) == ""
