from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from .time_utils import parse_calendar_date


# Upper bound for any single amount/quantity; keeps Numeric(14, x) columns from overflowing
MAX_DECIMAL = Decimal("999999999999")


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level: a referenced record does not exist."""


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer for incoming JSON:
    - coercers: field -> callable(raw, field_name) returning the cleaned value
      (also the allowlist of what clients may set)
    - required: fields that must be present and non-null
    - aliases: alternate client keys mapped onto canonical field names
    """
    coercers: dict[str, Callable[[Any, str], Any]]
    required: set[str] = field(default_factory=set)
    aliases: dict[str, str] = field(default_factory=dict)


def validate_payload(*, payload: Any, policy: PayloadPolicy) -> dict:
    """
    Validates + normalizes incoming JSON against a PayloadPolicy.

    Returns a cleaned dict containing only the fields the policy knows about.
    Unknown keys are rejected so typos surface as 400s instead of silently
    falling back to defaults.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    normalized: dict = {}
    for key, raw in payload.items():
        canonical = policy.aliases.get(key, key)
        if canonical not in policy.coercers:
            raise ValidationError(f"Field not allowed: {key}")
        normalized[canonical] = raw

    missing = sorted(
        f for f in policy.required
        if normalized.get(f) is None or (isinstance(normalized.get(f), str) and not normalized[f].strip())
    )
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cleaned: dict = {}
    for key, raw in normalized.items():
        if raw is None:
            cleaned[key] = None
            continue
        cleaned[key] = policy.coercers[key](raw, key)
    return cleaned


def coerce_decimal(value: Any, name: str) -> Decimal:
    # Reject bools explicitly (bool is a subclass of int)
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        raise ValidationError(f"{name} must be a finite number")
    if isinstance(value, (int, float, Decimal)):
        d = Decimal(str(value))
    elif isinstance(value, str):
        stripped = value.strip().replace(",", "")
        if not stripped:
            raise ValidationError(f"{name} must be a number")
        try:
            d = Decimal(stripped)
        except InvalidOperation:
            raise ValidationError(f"{name} must be a number")
    else:
        raise ValidationError(f"{name} must be a number")

    if not d.is_finite():
        raise ValidationError(f"{name} must be a finite number")
    if abs(d) > MAX_DECIMAL:
        raise ValidationError(f"{name} is too large")
    return d


def coerce_positive_decimal(value: Any, name: str) -> Decimal:
    d = coerce_decimal(value, name)
    if d <= 0:
        raise ValidationError(f"{name} must be > 0")
    return d


def coerce_non_negative_decimal(value: Any, name: str) -> Decimal:
    d = coerce_decimal(value, name)
    if d < 0:
        raise ValidationError(f"{name} must be >= 0")
    return d


def coerce_positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        n = value
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        n = int(value.strip())
    elif isinstance(value, float) and value.is_integer():
        n = int(value)
    else:
        raise ValidationError(f"{name} must be an integer")
    if n <= 0:
        raise ValidationError(f"{name} must be > 0")
    return n


def coerce_text(value: Any, name: str) -> str:
    if not isinstance(value, (str, int, float, Decimal)) or isinstance(value, bool):
        raise ValidationError(f"{name} must be a string")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{name} cannot be blank")
    if len(text) > 255:
        raise ValidationError(f"{name} exceeds max length 255")
    return text


def coerce_optional_text(value: Any, name: str) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if len(text) > 1000:
        raise ValidationError(f"{name} exceeds max length 1000")
    return text or None


def coerce_date(value: Any, name: str) -> date:
    try:
        parsed = parse_calendar_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date")
    if parsed is None:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date")
    return parsed


def coerce_choice(*choices: str) -> Callable[[Any, str], str]:
    def _coerce(value: Any, name: str) -> str:
        text = str(value).strip().lower()
        if text not in choices:
            raise ValidationError(f"{name} must be one of: {', '.join(choices)}")
        return text
    return _coerce
