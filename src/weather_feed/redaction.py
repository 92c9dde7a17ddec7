"""Helpers for redacting API keys from log lines and error messages."""

from __future__ import annotations

import re

REDACTED = "[REDACTED]"

_KEY_VALUE_SECRET_RE = re.compile(
    r"""(?ix)
    \b
    (
      appid|
      api[_-]?key|
      token|
      secret
    )
    (\s*[:=]\s*)
    ([^\s,;&"']+)
    """
)


def sanitize_text(text: str) -> str:
    """Redact API keys embedded in plain text, including URL query strings."""
    return _KEY_VALUE_SECRET_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", text)
