"""
Date and time helpers.

All stored date-times are UTC wall-clock values without a timezone, truncated
to whole seconds and rendered as ``YYYY-MM-DD HH:MM:SS``.
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError, MSG_INVALID_DATE

WALL_CLOCK_FORMAT = "%Y-%m-%d %H:%M:%S"
MONTH_FORMAT = "%Y-%m"

_datetime_adapter = TypeAdapter(datetime)

# ISO-8601 forms made only of digits; any other numeric string is rejected
# rather than read as a Unix timestamp
_ISO_YEAR = re.compile(r"\d{4}")
_ISO_YEAR_MONTH = re.compile(r"(\d{4})-(\d{2})")
_ISO_BASIC_DATE = re.compile(r"\d{8}")
_NUMERIC = re.compile(r"[+-]?\d+(\.\d*)?")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime truncated to seconds."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def today() -> date:
    return utcnow().date()


def month_bucket(moment: datetime) -> str:
    return moment.strftime(MONTH_FORMAT)


def _parse_numeric_iso(value: str) -> Optional[datetime]:
    """Parse the digit-only ISO forms: YYYY, YYYY-MM and YYYYMMDD."""
    if _ISO_YEAR.fullmatch(value):
        return datetime(int(value), 1, 1)
    match = _ISO_YEAR_MONTH.fullmatch(value)
    if match:
        return datetime(int(match.group(1)), int(match.group(2)), 1)
    if _ISO_BASIC_DATE.fullmatch(value):
        return datetime.strptime(value, "%Y%m%d")
    return None


def normalize_datetime(value: Any, field: str = "date") -> Optional[datetime]:
    """
    Normalize an ISO-8601 input to a naive UTC datetime with whole seconds.

    Absent inputs (None or blank strings) stay None. Aware values are
    converted to UTC before the timezone is dropped. Reduced forms such as
    "2030" or "2030-05" mean the first instant of that period. Bare numbers
    are not accepted as timestamps.

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    invalid = ValidationError(MSG_INVALID_DATE, details=f"Invalid {field}: {value!r}")

    if isinstance(value, str) and (_NUMERIC.fullmatch(value) or _ISO_YEAR_MONTH.fullmatch(value)):
        try:
            parsed = _parse_numeric_iso(value)
        except ValueError as e:
            raise invalid from e
        if parsed is None:
            raise invalid
    else:
        try:
            parsed = _datetime_adapter.validate_python(value)
        except PydanticValidationError as e:
            # Plain calendar dates such as "2024-05-01" mean midnight
            try:
                parsed = datetime.combine(date.fromisoformat(str(value)), datetime.min.time())
            except ValueError:
                raise invalid from e

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def format_wall_clock(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(WALL_CLOCK_FORMAT)
