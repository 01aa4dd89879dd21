"""
Free-text date resolution for spreadsheet cells.

Two-digit years ("3/14/24") follow strptime's century pivot and read
as 2024. Date libraries that take the year field literally read them
as year 24 instead, so those cells never land on a reminder day.
"""
from datetime import date, datetime
from typing import Optional

# Formats that carry no year; the reference year is appended before parsing.
YEARLESS_DATE_FORMATS = [
    '%m/%d',         # 3/14
]

DATE_FORMATS = [
    '%m/%d/%Y',      # 3/14/2024
    '%m/%d/%y',      # 3/14/24
    '%b %d, %Y',     # Mar 14, 2024
    '%B %d, %Y',     # March 14, 2024
]


def resolve_date_string(text: str, today: Optional[date] = None) -> Optional[date]:
    """
    Resolve a free-text cell to a calendar date.

    Year-less dates take the calendar year of ``today``, so "12/31" read
    on January 2nd refers to the coming December, not the one that just
    ended.

    Args:
        text: Cell contents
        today: Reference day for year-less dates (default: system date)

    Returns:
        Parsed date, or None if no known format matches
    """
    text = text.strip() if text else ''
    if not text:
        return None

    year = (today or date.today()).year

    for fmt in YEARLESS_DATE_FORMATS:
        try:
            return datetime.strptime(f"{text}/{year}", f"{fmt}/%Y").date()
        except ValueError:
            continue

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    return None
