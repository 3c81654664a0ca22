"""
Utility modules for the airline assistant
"""

from .logger import setup_logging
from .validators import validate_location_code, parse_day_month_year, parse_iso_date

__all__ = [
    "setup_logging",
    "validate_location_code",
    "parse_day_month_year",
    "parse_iso_date",
]
