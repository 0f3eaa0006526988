from __future__ import annotations

import json
import logging
import os
import re
from contextvars import ContextVar
from typing import Any, Optional

_EMAIL_RE = re.compile(r"\b([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")


def scrub(text: str) -> str:
    """Mask e-mail local parts (``jane.doe@corp.com`` -> ``j***@corp.com``)."""
    if not text:
        return text or ""
    return _EMAIL_RE.sub(lambda m: f"{m.group(1)}***@{m.group(2)}", text)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "msg": scrub(record.getMessage()),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)  # type: ignore[arg-type]
        rid = get_request_id()
        if rid and not hasattr(record, "request_id"):
            data["request_id"] = rid
        for key in ("request_id", "handler", "method", "status", "employee_id", "outcome"):
            if hasattr(record, key):
                data[key] = getattr(record, key)
        return json.dumps(data, ensure_ascii=False, default=str)


def configure_json_logging(level: int = logging.INFO) -> None:
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    # Remove other handlers to avoid duplicate logs
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)


def maybe_enable_json_logging() -> None:
    if (os.environ.get("JSON_LOGS") or "").strip().lower() in {"1", "true", "yes", "on"}:
        configure_json_logging()


# Request-scoped context helpers
_REQUEST_ID: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_request_id(request_id: Optional[str]) -> None:
    _REQUEST_ID.set(request_id)


def get_request_id() -> Optional[str]:
    return _REQUEST_ID.get()
