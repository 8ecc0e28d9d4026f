"""
Month-precision date helpers.

Profile dates are edited and shown as `YYYY-MM` and stored by the backend as
`YYYY-MM-DD` (first of the month). Unparsable input becomes "" so a bad value
never reaches the UI as a format error.
"""

import re
from datetime import datetime
from typing import Any

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


def _valid_month(year: str, month: str) -> bool:
    return 1 <= int(month) <= 12 and int(year) > 0


def to_display_month(value: Any) -> str:
    """Normalize `YYYY-MM`, `YYYY-MM-DD` or an ISO datetime to `YYYY-MM`."""
    if not value:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m")
    text = str(value).strip()

    match = _MONTH_RE.match(text)
    if match and _valid_month(*match.groups()):
        return text

    match = _DATE_PREFIX_RE.match(text)
    if match:
        year, month, day = match.groups()
        try:
            datetime(int(year), int(month), int(day))
        except ValueError:
            return ""
        return f"{year}-{month}"
    return ""


def to_api_date(value: Any) -> str:
    """Expand a month (or full date) to `YYYY-MM-DD`, first of the month."""
    month = to_display_month(value)
    if not month:
        return ""
    return f"{month}-01"
