"""
Validation utilities
"""

import re
from datetime import date
from typing import Optional


LOCATION_CODE_PATTERN = re.compile(r'^[A-Z]{3}$')


def validate_location_code(code: Optional[str]) -> bool:
    """
    Validate location code format
    Location codes are exactly 3 upper-case letters
    """
    if not code:
        return False

    return bool(LOCATION_CODE_PATTERN.match(code))


def parse_day_month_year(value: str) -> Optional[date]:
    """
    Parse a D/M/Y or D-M-Y date, reading 2-digit years as 20YY.
    Returns None for malformed or impossible dates.
    """
    parts = re.split(r'[/\-]', value.strip())
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return None

    day, month, year = parts
    if len(year) == 2:
        year = f"20{year}"

    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_iso_date(value: str) -> Optional[date]:
    """Parse YYYY-MM-DD, returning None for impossible dates"""
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None
