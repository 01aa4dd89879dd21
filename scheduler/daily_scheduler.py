"""Daily reminder scheduler firing at local midnight."""
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from notifier.discord_client import DiscordClient, ErrorReporter
from processor.reminder_engine import ReminderEngine
from sheets.review_sheet import ReviewEventSheet

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


class ReminderSetupError(Exception):
    """Raised when the reminder channel or role cannot be used."""


def get_next_midnight(now: datetime) -> datetime:
    """Return the first local midnight strictly after ``now``."""
    return datetime.combine(now.date() + ONE_DAY, datetime.min.time())


class DailyScheduler:
    """
    Sends the review event reminder once a day.

    The first firing happens at the next local midnight, then every 24
    hours after the previous scheduled time. A failing cycle is logged and
    reported, and never cancels later cycles.
    """

    def __init__(
        self,
        sheet: ReviewEventSheet,
        discord: DiscordClient,
        error_reporter: ErrorReporter,
        guild_id: str,
        channel_id: str,
        role_id: str,
        engine: Optional[ReminderEngine] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.sheet = sheet
        self.discord = discord
        self.error_reporter = error_reporter
        self.guild_id = guild_id
        self.channel_id = channel_id
        self.role_id = role_id
        self.engine = engine or ReminderEngine()
        self.clock = clock
        self.next_fire_time: Optional[datetime] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def fire(self) -> Optional[str]:
        """
        Run one reminder cycle.

        Returns:
            The message that was sent, or None if nothing was sent
        """
        try:
            today = self.clock().date()
            events = self.sheet.get_all_events(today)
            roster = self.discord.fetch_role_members(self.guild_id, self.role_id)
            reminder = self.engine.build_reminder(today, events.values(), roster)

            if reminder is not None:
                self.discord.send_message(self.channel_id, reminder)
            return reminder

        except Exception as e:
            # Nothing above this loop can handle the error; keep the schedule alive.
            logger.error(
                f"Failed to complete daily reminder: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            self.error_reporter.report(e)
            return None

    def _wait_until(self, when: datetime) -> bool:
        """Wait until ``when``; return False if stopped first."""
        # Waits run on a monotonic timer, so recheck the wall clock when one
        # ends. A clock set back (DST fall-back) leaves time still to wait.
        while True:
            seconds = (when - self.clock()).total_seconds()
            if seconds <= 0:
                return not self._stop_event.is_set()
            if self._stop_event.wait(seconds):
                return False

    def run_forever(self) -> None:
        """Fire at every midnight until stop() is called."""
        self.next_fire_time = get_next_midnight(self.clock())
        logger.info(f"First reminder scheduled for {self.next_fire_time.isoformat()}")

        while self._wait_until(self.next_fire_time):
            self.fire()
            self.next_fire_time = self.next_fire_time + ONE_DAY
            logger.info(f"Next reminder scheduled for {self.next_fire_time.isoformat()}")

        logger.info("Reminder scheduler stopped")

    def start(self) -> None:
        """Run the schedule in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_forever,
            name='daily-reminder',
            daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Cancel the pending wait and wait for the loop to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


def initialize_reminders(
    sheet: ReviewEventSheet,
    discord: DiscordClient,
    error_reporter: ErrorReporter,
    guild_id: str,
    channel_id: str,
    role_id: str,
    clock: Callable[[], datetime] = datetime.now
) -> DailyScheduler:
    """
    Check the reminder channel and role, then build the scheduler.

    Raises:
        ReminderSetupError: If the channel is missing or not text-based, or
            the role does not exist. The error has already been logged and
            reported.
    """
    channel = discord.fetch_channel(channel_id)
    if not discord.is_text_channel(channel):
        message = f"tutoring officers channel (ID {channel_id}) is invalid: {channel}"
        logger.error(message)
        error_reporter.report(message)
        raise ReminderSetupError(message)

    role = discord.fetch_role(guild_id, role_id)
    if role is None:
        message = f"failed to get tutoring officers role (ID: {role_id})"
        logger.error(message)
        error_reporter.report(message)
        raise ReminderSetupError(message)

    return DailyScheduler(
        sheet=sheet,
        discord=discord,
        error_reporter=error_reporter,
        guild_id=guild_id,
        channel_id=channel_id,
        role_id=role_id,
        clock=clock
    )
