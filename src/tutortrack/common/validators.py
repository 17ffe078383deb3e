from __future__ import annotations

from typing import Any, Optional

from ..core.constants import MAX_TOPIC_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_int(value: Any, field_name: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_month(value: Any) -> int:
    month = require_int(value, "Month")
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    return month


def require_year(value: Any) -> int:
    year = require_int(value, "Year")
    if not 1900 <= year <= 9999:
        raise ValidationError("Year is out of range")
    return year


def require_status(value: Any) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Status must be 'Present' or 'Absent'")


def clean_topic(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    topic = str(value).strip()
    if not topic:
        return None
    if len(topic) > MAX_TOPIC_LENGTH:
        raise ValidationError(f"Topic must be at most {MAX_TOPIC_LENGTH} characters")
    return topic
