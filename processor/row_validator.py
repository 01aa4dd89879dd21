"""Schema validation for raw spreadsheet rows."""
import logging
from enum import IntEnum
from typing import Any, List, Sequence

from processor.models import RowValidation

logger = logging.getLogger(__name__)


class Column(IntEnum):
    """Column positions; comments give first row; second row contents."""
    EVENT = 0                # Event name; (blank)
    PROFESSOR = 1            # Professor email; Professor name
    EMAIL_DATE = 2           # Email date; (blank)
    EMAIL_CHECKBOX = 3       # Email checkbox; (blank)
    PUBLICITY_DATE = 4       # Publicity date; (blank)
    PUBLICITY_CHECKBOX = 5   # Publicity checkbox; (blank)
    EVENT_DATE = 6           # Event date; (day of the week)
    TEST_DATE = 7            # Test date; (day of the week)
    LOCATION = 8             # Location; (blank)
    LEAD_HOSTS = 9           # Lead host 1; Lead host 2
    HOSTS = 10               # Host 1; Host 2
    BACKUP_HOSTS = 11        # Backup host 1; Backup host 2
    EXPECTED_ATTENDANCE = 12  # Expected attendance; (blank)


REVIEW_EVENT_ROW_FIELDS = len(Column)


def pad_row(row: Sequence[Any], length: int) -> List[Any]:
    """
    Pad a row with empty strings up to the given length.

    Rows longer than ``length`` are returned unchanged, never truncated.

    Args:
        row: Raw row cells
        length: Minimum number of cells

    Returns:
        New list with at least ``length`` cells
    """
    padded = list(row)
    if len(padded) < length:
        padded.extend([''] * (length - len(padded)))
    return padded


def _validate_cell(value: Any) -> str:
    """Every column accepts any string, trimmed."""
    if not isinstance(value, str):
        raise TypeError(f"expected string cell, got {type(value).__name__}")
    return value.strip()


def validate_row(
    row: Sequence[Any],
    field_count: int = REVIEW_EVENT_ROW_FIELDS
) -> RowValidation:
    """
    Validate a physical row against the review event column schema.

    The row is padded to ``field_count`` cells first. Cells beyond the
    schema are passed through untouched. Failure is an expected outcome
    for header, footer and comment rows, so this never raises.

    Args:
        row: Raw row cells
        field_count: Number of schema columns

    Returns:
        RowValidation with the cleaned cells on success
    """
    padded = pad_row(row, field_count)
    cleaned = []

    for index, value in enumerate(padded[:field_count]):
        try:
            cleaned.append(_validate_cell(value))
        except TypeError as e:
            logger.debug(f"Row failed validation at column {index}: {e}")
            return RowValidation(
                success=False,
                data=padded,
                error=f"column {index}: {e}"
            )

    cleaned.extend(padded[field_count:])
    return RowValidation(success=True, data=cleaned)
