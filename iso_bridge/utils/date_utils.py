"""Date manipulation utilities"""

import re
from datetime import date, datetime, timezone

# Two-digit years at or above the pivot belong to the 1900s
CENTURY_PIVOT = 50

YYMMDD_PATTERN = re.compile(r"[0-9]{6}")


def normalize_date(yymmdd: str) -> str:
    """
    Convert a legacy YYMMDD date to ISO YYYY-MM-DD.

    Years 50-99 map to 1950-1999, 00-49 to 2000-2049. Anything that is not
    six digits falls back to today's date, the same as an unset value date.

    Example:
        990530 → 1999-05-30
        250930 → 2025-09-30
    """
    if not yymmdd or not YYMMDD_PATTERN.fullmatch(yymmdd):
        return date.today().isoformat()

    year = int(yymmdd[:2])
    full_year = 1900 + year if year >= CENTURY_PIVOT else 2000 + year

    return f"{full_year}-{yymmdd[2:4]}-{yymmdd[4:6]}"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
