import re
from datetime import date, datetime
from typing import Optional, Union

from core.errors import ValidationError

DATE_KEY_FORMAT = "%Y-%m-%d"

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# First character may not be a dot so hidden files and "." / ".." never match.
_FILENAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.\- ]*$")
_DIGITS_RE = re.compile(r"^[0-9]+$")
_MAX_FILENAME_LENGTH = 255


def parse_date_key(value) -> date:
    """Validate a date folder key and return the calendar date it names."""
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        raise ValidationError(f"Invalid date key: {value!r}")
    try:
        return datetime.strptime(value, DATE_KEY_FORMAT).date()
    except ValueError as e:
        raise ValidationError(f"Invalid date key: {value!r}") from e


def validate_date_key(value) -> str:
    parse_date_key(value)
    return value


def validate_filename(value) -> str:
    """Reject anything that could escape its date folder."""
    if not isinstance(value, str) or len(value) > _MAX_FILENAME_LENGTH:
        raise ValidationError(f"Invalid filename: {value!r}")
    if ".." in value or "/" in value or "\\" in value:
        raise ValidationError(f"Invalid filename: {value!r}")
    if not _FILENAME_RE.match(value):
        raise ValidationError(f"Invalid filename: {value!r}")
    return value


def parse_count(value: Union[int, str, None], default: Optional[int] = None) -> int:
    """Parse a non-negative integer parameter such as a photo count.

    ``None`` and the empty string fall back to *default*. Booleans, negative
    numbers, and strings with anything but ASCII digits are rejected.
    """
    if value is None or value == "":
        if default is None:
            raise ValidationError("Missing numeric parameter")
        return default
    if isinstance(value, bool):
        raise ValidationError(f"Invalid numeric parameter: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValidationError(f"Negative numeric parameter: {value!r}")
        return value
    if isinstance(value, str) and _DIGITS_RE.match(value):
        return int(value)
    raise ValidationError(f"Invalid numeric parameter: {value!r}")


def parse_page(value: Union[int, str, None]) -> int:
    page = parse_count(value, default=1)
    if page < 1:
        raise ValidationError(f"Page numbers start at 1, got {value!r}")
    return page
