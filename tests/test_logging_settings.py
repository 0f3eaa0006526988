from __future__ import annotations

import json
import logging

from core.logging_utils import JsonFormatter, scrub, set_request_id
from core.settings import get_settings, reset_settings_cache


def test_scrub_masks_email_local_part():
    assert scrub("mail jane.doe@corp.com now") == "mail j***@corp.com now"
    assert scrub("") == ""


def test_json_formatter_carries_request_id_and_extras():
    set_request_id("rid-1")
    try:
        record = logging.LogRecord("paystub_portal.coverage", logging.INFO, __file__, 1, "ran for %s", ("a@b.io",), None)
        record.outcome = "computed"
        data = json.loads(JsonFormatter().format(record))
    finally:
        set_request_id(None)
    assert data["request_id"] == "rid-1"
    assert data["outcome"] == "computed"
    assert data["msg"] == "ran for a***@b.io"


def test_settings_parse_env(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "  ")
    monkeypatch.setenv("PORTAL_AUTO_APPLY_DDL", "off")
    monkeypatch.setenv("ADMIN_TOKEN_TTL", "-5")
    monkeypatch.setenv("EMPLOYEE_TOKEN_TTL", "600")
    reset_settings_cache()
    try:
        s = get_settings()
        assert s.secret_key == "dev-secret"
        assert s.auto_apply_ddl is False
        assert s.admin_token_ttl == 7200
        assert s.employee_token_ttl == 600
    finally:
        reset_settings_cache()
