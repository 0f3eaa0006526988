from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from core.auth import make_admin_token, make_employee_token, verify_admin_token, verify_employee_token
from core.services import auth as auth_service
from core.settings import reset_settings_cache


def test_admin_token_roundtrip_and_type_check():
    tok = make_admin_token("s3cret", ttl_seconds=60)
    payload = verify_admin_token("s3cret", tok)
    assert payload and payload["typ"] == "admin" and "hr_admin" in payload["roles"]
    assert verify_employee_token("s3cret", tok) is None
    assert verify_admin_token("other", tok) is None


def test_expired_and_garbled_tokens_are_rejected():
    assert verify_admin_token("s3cret", make_admin_token("s3cret", ttl_seconds=-1)) is None
    assert verify_admin_token("s3cret", "not-a-token") is None
    assert verify_employee_token("s3cret", "a.b") is None


def test_employee_token_carries_business_key():
    payload = verify_employee_token("s3cret", make_employee_token("s3cret", "EMP008"))
    assert payload and payload["eid"] == "EMP008"


def test_extract_token_precedence():
    assert auth_service.extract_token("Bearer hdr", None, None, "cookie") == "cookie"
    assert auth_service.extract_token("Bearer hdr", "x", None, None) == "x"
    assert auth_service.extract_token("Bearer hdr", None, None, None) == "hdr"
    assert auth_service.extract_token("Basic zzz", None, None, None) is None


@pytest.mark.parametrize("configured", ["letmein", generate_password_hash("letmein")])
def test_verify_admin_password_plain_or_hashed(monkeypatch, configured):
    monkeypatch.setenv("ADMIN_PASSWORD", configured)
    reset_settings_cache()
    try:
        assert auth_service.verify_admin_password("letmein") is True
        assert auth_service.verify_admin_password("wrong") is False
    finally:
        reset_settings_cache()


def test_empty_admin_password_disables_login(monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "")
    reset_settings_cache()
    try:
        assert auth_service.verify_admin_password("") is False
        assert auth_service.verify_admin_password("anything") is False
    finally:
        reset_settings_cache()


def test_authenticate_employee_resolves_active_employee(session, settings_env, make_employee):
    active = make_employee("E1")
    inactive = make_employee("E2", is_active=False)

    assert auth_service.authenticate_employee(session, auth_service.issue_employee_token(active)).employee_id == "E1"
    assert auth_service.authenticate_employee(session, auth_service.issue_employee_token(inactive)) is None
    assert auth_service.authenticate_employee(session, auth_service.issue_admin_token()) is None


def test_plain_admin_password_is_compared_literally(monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "pä$word")
    reset_settings_cache()
    try:
        assert auth_service.verify_admin_password("pä$word") is True
        assert auth_service.verify_admin_password("pa$word") is False
    finally:
        reset_settings_cache()


def test_hash_string_itself_is_not_accepted(monkeypatch):
    hashed = generate_password_hash("letmein")
    monkeypatch.setenv("ADMIN_PASSWORD", hashed)
    reset_settings_cache()
    try:
        assert auth_service.verify_admin_password(hashed) is False
    finally:
        reset_settings_cache()
