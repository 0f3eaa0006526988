from __future__ import annotations

import base64
import hmac
import json
import secrets
import time
from hashlib import sha256
from typing import Any


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode().rstrip('=')


def _b64url_decode(data: str) -> bytes:
    s = data + '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(s.encode())


def _sign(secret: str, payload: dict[str, Any]) -> str:
    body = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()
    sig = hmac.new(secret.encode(), body, sha256).digest()
    return f"{_b64url(body)}.{_b64url(sig)}"


def _verify(secret: str, token: str, typ: str) -> dict[str, Any] | None:
    try:
        part_body, part_sig = token.split('.')
    except ValueError:
        return None
    try:
        body = _b64url_decode(part_body)
        got_sig = _b64url_decode(part_sig)
    except (ValueError, TypeError):
        return None
    exp_sig = hmac.new(secret.encode(), body, sha256).digest()
    if not hmac.compare_digest(exp_sig, got_sig):
        return None
    try:
        payload = json.loads(body.decode())
    except (UnicodeDecodeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    if int(payload.get("exp", 0)) < int(time.time()):
        return None
    if payload.get("typ") != typ:
        return None
    if int(payload.get("ver", 0)) != 1:
        return None
    return payload


def make_admin_token(secret: str, *, ttl_seconds: int = 2 * 60 * 60, roles: list[str] | None = None) -> str:
    now = int(time.time())
    payload = {
        "typ": "admin",
        "iat": now,
        "exp": now + int(ttl_seconds),
        "ver": 1,
        "jti": secrets.token_hex(8),
        "roles": list(roles or ["hr_admin"]),
    }
    return _sign(secret, payload)


def verify_admin_token(secret: str, token: str) -> dict[str, Any] | None:
    return _verify(secret, token, "admin")


def make_employee_token(secret: str, employee_id: str, *, ttl_seconds: int = 2 * 60 * 60) -> str:
    now = int(time.time())
    payload = {
        "typ": "employee",
        "eid": str(employee_id),
        "iat": now,
        "exp": now + int(ttl_seconds),
        "ver": 1,
        "roles": ["employee"],
    }
    return _sign(secret, payload)


def verify_employee_token(secret: str, token: str) -> dict[str, Any] | None:
    payload = _verify(secret, token, "employee")
    if not payload or not str(payload.get("eid") or "").strip():
        return None
    return payload
