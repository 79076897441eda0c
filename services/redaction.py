from __future__ import annotations

import re


_EMAIL_RE = re.compile(r"\b([A-Za-z0-9._%+-])([A-Za-z0-9._%+-]*)(@[A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")


def _mask_email(match: re.Match) -> str:
    return f"{match.group(1)}***{match.group(3)}"


def redact_text(value: str | None) -> str:
    """Mask e-mail addresses for log lines (a***@example.com)."""
    if not value:
        return ""
    return _EMAIL_RE.sub(_mask_email, value)
