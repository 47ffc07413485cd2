"""
Input checks shared by the quote and category handlers.
"""

from __future__ import annotations

from typing import Any

from .errors import ValidationError

# bigserial upper bound
MAX_ID = 2**63 - 1


def parse_id(raw: Any, *, message: str) -> int:
    """
    Parse a positive decimal identifier, raising `ValidationError(message)`.
    """
    if isinstance(raw, bool):
        raise ValidationError(message)
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw if raw is not None else "").strip()
        if not (text.isascii() and text.isdigit()):
            raise ValidationError(message)
        value = int(text)

    if value < 1 or value > MAX_ID:
        raise ValidationError(message)
    return value


def parse_optional_id(raw: Any, *, message: str) -> int | None:
    """
    Like `parse_id`, but None and blank strings mean "no reference".
    """
    if raw is None:
        return None
    if isinstance(raw, str) and not raw.strip():
        return None
    return parse_id(raw, message=message)


def required_text(raw: Any) -> str:
    """
    Trimmed text, or "" when missing.
    """
    return str(raw if raw is not None else "").strip()
