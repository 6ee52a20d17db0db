"""Redaction helpers for logs and diagnostics."""

from __future__ import annotations

import re

_QUERY_SECRET_RE = re.compile(r"(?i)(token|secret|password|api_key|apikey|access_token)=([^&\s]+)")
_BEARER_RE = re.compile(r"(?i)(bearer\s+)([A-Za-z0-9._~-]+)")


def redact_secrets(text: str) -> str:
    """Mask query-string credentials and bearer tokens in a log string."""
    if not text:
        return text
    redacted = _QUERY_SECRET_RE.sub(r"\1=***", text)
    return _BEARER_RE.sub(r"\1***", redacted)
