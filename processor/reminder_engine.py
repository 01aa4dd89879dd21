"""Daily reminder decisions for review events."""
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from processor.models import ReviewEvent, RosterMember
from processor.pings import build_pings

logger = logging.getLogger(__name__)

REMINDER_TITLE = 'Tutoring Reminder'


def format_long_date(day: date) -> str:
    """Format a date as e.g. 'October 18, 2026'."""
    return f"{day:%B} {day.day}, {day.year}"


class ReminderEngine:
    """Decides which reminders fire for a given day."""

    def __init__(self, title: str = REMINDER_TITLE):
        self.title = title

    def build_reminder(
        self,
        today: date,
        events: Iterable[ReviewEvent],
        roster: Sequence[RosterMember]
    ) -> Optional[str]:
        """
        Build the reminder message for ``today``.

        Args:
            today: Current calendar day
            events: Snapshot of review events, in sheet order
            roster: Members used to resolve host names to mentions

        Returns:
            Message text, or None if nothing is due
        """
        lines = []
        for event in events:
            lines.extend(self.event_lines(today, event, roster))

        if not lines:
            logger.info(f"No reminders due for {today.isoformat()}")
            return None

        logger.info(f"Built {len(lines)} reminder lines for {today.isoformat()}")
        header = f"{self.title} - {format_long_date(today)}"
        return header + '\n\n' + '\n'.join(lines)

    def event_lines(
        self,
        today: date,
        event: ReviewEvent,
        roster: Sequence[RosterMember]
    ) -> List[str]:
        """Reminder lines contributed by a single event."""
        lines = []

        # Email to professor is due and not done.
        if (
            event.email_date
            and event.email_date <= today
            and not event.email_done
        ):
            lines.append(
                f"{event.name} - Email to {event.professor.name} via "
                f"{event.professor.email} is due! "
                f"{build_pings(roster, event.lead_hosts)}"
            )

        # Publicity request is due and not done.
        if (
            event.publicity_date
            and event.publicity_date <= today
            and not event.publicity_done
        ):
            lines.append(
                f"{event.name} - Publicity request is due! "
                f"{build_pings(roster, event.lead_hosts)}"
            )

        # Everyone hosting gets pinged, so a person on two lists is pinged twice.
        everyone = event.lead_hosts + event.hosts + event.backup_hosts
        if event.event_date and event.event_date == today + timedelta(days=1):
            lines.append(
                f"{event.name} is tomorrow! {build_pings(roster, everyone)}"
            )
        elif event.event_date and event.event_date == today:
            lines.append(
                f"{event.name} is today! {build_pings(roster, everyone)}"
            )

        return lines
