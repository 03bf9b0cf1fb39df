"""Validation helpers used when reading configuration."""
from typing import Any, Optional


def ensure(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


def as_int(value: Any, name: str) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def as_optional_seconds(value: Any, name: str) -> Optional[float]:
    """``None``, ``""`` and ``0`` disable the limit."""
    if value is None or str(value).strip() == "":
        return None
    try:
        seconds = float(str(value).strip())
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {value!r}") from None
    ensure(seconds >= 0, f"{name} must not be negative")
    return seconds or None
