"""Spreadsheet client and snapshot cache for review events."""
import logging
import time
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from processor.event_parser import ReviewEventParser
from processor.models import ReviewEvent

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

# Statuses retried with backoff; anything else is raised at once.
RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


class GoogleSheetsClient:
    """Reads one tab of a Google spreadsheet through the Sheets values API."""

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        api_key: Optional[str] = None,
        service_account_file: Optional[str] = None,
        max_retries: int = 3,
        service: Optional[Any] = None
    ):
        """
        Initialize the spreadsheet client.

        Args:
            spreadsheet_id: ID from the spreadsheet URL
            sheet_name: Name of the tab to read
            api_key: API key, for sheets shared by link
            service_account_file: Service account key file, for private sheets
            max_retries: Attempts before giving up (default: 3)
            service: Optional pre-built Sheets service (for testing)
        """
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.api_key = api_key
        self.service_account_file = service_account_file
        self.max_retries = max_retries
        self._service = service

    @property
    def range(self) -> str:
        """A1 range covering the whole tab."""
        return "'{}'".format(self.sheet_name.replace("'", "''"))

    def _get_service(self) -> Any:
        """Build the Sheets service on first use."""
        if self._service is not None:
            return self._service

        if self.service_account_file:
            credentials = service_account.Credentials.from_service_account_file(
                self.service_account_file, scopes=SCOPES
            )
            self._service = build(
                "sheets", "v4", credentials=credentials, cache_discovery=False
            )
        elif self.api_key:
            self._service = build(
                "sheets", "v4", developerKey=self.api_key, cache_discovery=False
            )
        else:
            raise ValueError("either api_key or service_account_file is required")
        return self._service

    def fetch_rows(self) -> List[List[str]]:
        """
        Fetch every row of the tab.

        The values API omits trailing empty cells, so a blank sheet row
        comes back as an empty list.

        Returns:
            List of rows, header first

        Raises:
            HttpError: If the request fails for good
        """
        logger.info(f"Fetching sheet '{self.sheet_name}'")
        request = self._get_service().spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id,
            range=self.range
        )

        base_delay = 1  # seconds

        for attempt in range(self.max_retries):
            try:
                result = request.execute()
                break

            except HttpError as e:
                status = e.resp.status
                if status in RETRYABLE_STATUSES and attempt < self.max_retries - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"Sheets API returned {status} "
                        f"(attempt {attempt + 1}/{self.max_retries}), "
                        f"retrying in {delay}s"
                    )
                    time.sleep(delay)
                    continue
                logger.error(f"Failed to read sheet '{self.sheet_name}': {e}")
                raise

        rows = result.get("values", [])
        logger.info(f"Fetched {len(rows)} rows from sheet '{self.sheet_name}'")
        return rows


class ReviewEventSheet:
    """Cached snapshot of the review events sheet, keyed by event name."""

    # This spreadsheet doesn't change very often.
    REFRESH_INTERVAL = 3600  # seconds

    def __init__(
        self,
        client: GoogleSheetsClient,
        parser: Optional[ReviewEventParser] = None,
        refresh_interval: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.client = client
        self.parser = parser or ReviewEventParser()
        self.refresh_interval = (
            self.REFRESH_INTERVAL if refresh_interval is None else refresh_interval
        )
        self.clock = clock
        self._events: Dict[str, ReviewEvent] = {}
        self._fetched_at: Optional[float] = None

    def get_all_events(self, today: Optional[date] = None) -> Dict[str, ReviewEvent]:
        """
        Return the latest snapshot, refetching it once it has gone stale.

        Args:
            today: Reference day for year-less dates when refetching

        Returns:
            Mapping of event name to ReviewEvent, in sheet order
        """
        now = self.clock()
        if (
            self._fetched_at is None
            or now - self._fetched_at >= self.refresh_interval
        ):
            self.refresh(today)
        return self._events

    def refresh(self, today: Optional[date] = None) -> Dict[str, ReviewEvent]:
        """Refetch the sheet and rebuild the snapshot wholesale."""
        rows = self.client.fetch_rows()
        events = {}
        for event in self.parser.parse_rows(rows, today):
            if event.name in events:
                logger.warning(f"Duplicate event name '{event.name}', keeping last")
            events[event.name] = event

        self._events = events
        self._fetched_at = self.clock()
        logger.info(f"Loaded {len(events)} review events")
        return events

    def invalidate(self) -> None:
        """Force the next read to refetch the sheet."""
        self._fetched_at = None
