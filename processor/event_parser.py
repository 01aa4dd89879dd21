"""Parser turning paired spreadsheet rows into review events."""
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterator, List, Optional, Sequence

from processor.date_resolver import resolve_date_string
from processor.models import Professor, ReviewEvent
from processor.row_validator import Column, REVIEW_EVENT_ROW_FIELDS, validate_row

logger = logging.getLogger(__name__)

CHECKED_TOKEN = 'TRUE'

_COUNT_PATTERN = re.compile(r'\d+')


@dataclass
class DetailRow:
    """First physical row of an event: the event's own details."""
    event: str
    professor_email: str
    email_date: str
    email_checkbox: str
    publicity_date: str
    publicity_checkbox: str
    event_date: str
    test_date: str
    location: str
    lead_host: str
    host: str
    backup_host: str
    expected_attendance: str

    @classmethod
    def from_cells(cls, cells: Sequence[str]) -> 'DetailRow':
        return cls(
            event=cells[Column.EVENT],
            professor_email=cells[Column.PROFESSOR],
            email_date=cells[Column.EMAIL_DATE],
            email_checkbox=cells[Column.EMAIL_CHECKBOX],
            publicity_date=cells[Column.PUBLICITY_DATE],
            publicity_checkbox=cells[Column.PUBLICITY_CHECKBOX],
            event_date=cells[Column.EVENT_DATE],
            test_date=cells[Column.TEST_DATE],
            location=cells[Column.LOCATION],
            lead_host=cells[Column.LEAD_HOSTS],
            host=cells[Column.HOSTS],
            backup_host=cells[Column.BACKUP_HOSTS],
            expected_attendance=cells[Column.EXPECTED_ATTENDANCE]
        )


@dataclass
class ContactRow:
    """Second physical row of an event: professor name and extra hosts."""
    professor_name: str
    lead_host: str
    host: str
    backup_host: str

    @classmethod
    def from_cells(cls, cells: Sequence[str]) -> 'ContactRow':
        return cls(
            professor_name=cells[Column.PROFESSOR],
            lead_host=cells[Column.LEAD_HOSTS],
            host=cells[Column.HOSTS],
            backup_host=cells[Column.BACKUP_HOSTS]
        )


class ReviewEventParser:
    """Parser for the two-rows-per-event review sheet layout."""

    def parse_rows(
        self,
        rows: Sequence[Sequence[str]],
        today: Optional[date] = None
    ) -> Iterator[ReviewEvent]:
        """
        Parse every event in a sheet.

        Row 0 is the header; events follow as row pairs. The first empty
        row marks the start of the comments section and ends parsing.

        Args:
            rows: All sheet rows
            today: Reference day for year-less dates

        Yields:
            ReviewEvent objects in sheet order
        """
        # Start at 1 to skip the header row.
        for index in range(1, len(rows), 2):
            row1 = rows[index]
            row2 = rows[index + 1] if index + 1 < len(rows) else []

            # Start of comments.
            if len(row1) == 0:
                break

            event = self.parse_entry(row1, row2, today)
            if event is None:
                logger.debug(
                    f"Skipping malformed event rows {index}-{index + 1}"
                )
                continue
            yield event

    def parse_entry(
        self,
        row1: Sequence[str],
        row2: Sequence[str],
        today: Optional[date] = None
    ) -> Optional[ReviewEvent]:
        """
        Parse one logical event from its two physical rows.

        Args:
            row1: First physical row
            row2: Second physical row
            today: Reference day for year-less dates

        Returns:
            ReviewEvent, or None if either row fails validation
        """
        validated1 = validate_row(row1, REVIEW_EVENT_ROW_FIELDS)
        validated2 = validate_row(row2, REVIEW_EVENT_ROW_FIELDS)
        if not validated1.success or not validated2.success:
            return None

        return self.merge_rows(
            DetailRow.from_cells(validated1.data),
            ContactRow.from_cells(validated2.data),
            today
        )

    def merge_rows(
        self,
        details: DetailRow,
        contact: ContactRow,
        today: Optional[date] = None
    ) -> ReviewEvent:
        """
        Merge the two row views of one event into a ReviewEvent.

        The professor column holds the email on the first row and the name
        on the second; host columns hold one name per row.

        Args:
            details: First physical row
            contact: Second physical row
            today: Reference day for year-less dates

        Returns:
            ReviewEvent; blank optional fields are left as None
        """
        return ReviewEvent(
            name=details.event,
            professor=Professor(
                name=contact.professor_name,
                email=details.professor_email
            ),
            email_date=resolve_date_string(details.email_date, today),
            email_done=details.email_checkbox == CHECKED_TOKEN,
            publicity_date=resolve_date_string(details.publicity_date, today),
            publicity_done=details.publicity_checkbox == CHECKED_TOKEN,
            event_date=resolve_date_string(details.event_date, today),
            test_date=resolve_date_string(details.test_date, today),
            location=details.location,
            lead_hosts=self._merge_names(details.lead_host, contact.lead_host),
            hosts=self._merge_names(details.host, contact.host),
            backup_hosts=self._merge_names(
                details.backup_host, contact.backup_host
            ),
            expected_attendance=self._parse_count(details.expected_attendance)
        )

    def _merge_names(self, *names: str) -> List[str]:
        """Drop blank names, keeping first-row names first."""
        return [name for name in names if name and name.strip()]

    def _parse_count(self, text: str) -> Optional[int]:
        """Parse a non-negative integer, or None if the cell is not one."""
        text = text.strip()
        if not _COUNT_PATTERN.fullmatch(text):
            return None
        return int(text)
