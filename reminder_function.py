"""Entry point for the daily review event reminder service."""
import argparse
import json
import logging
import os
import signal
import sys
from dataclasses import dataclass
from typing import List, Mapping, Optional

from notifier.discord_client import DiscordClient, ErrorReporter
from scheduler.daily_scheduler import ReminderSetupError, initialize_reminders
from sheets.review_sheet import GoogleSheetsClient, ReviewEventSheet


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


@dataclass
class ReminderConfig:
    """Service configuration read from the environment."""
    discord_token: str
    guild_id: str
    channel_id: str
    role_id: str
    spreadsheet_id: str
    sheet_name: str
    google_api_key: Optional[str] = None
    google_credentials_file: Optional[str] = None
    dev_error_channel_id: Optional[str] = None
    refresh_interval: int = 3600
    timeout_seconds: int = 30
    log_level: str = 'INFO'


REQUIRED_VARIABLES = {
    'DISCORD_TOKEN': 'discord_token',
    'GUILD_ID': 'guild_id',
    'TUTORING_CHANNEL_ID': 'channel_id',
    'TUTORING_ROLE_ID': 'role_id',
    'REVIEW_EVENTS_SPREADSHEET_ID': 'spreadsheet_id',
    'QUARTER_NAME': 'sheet_name',
}


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name, str(default))
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{value}'")


def load_config(environ: Optional[Mapping[str, str]] = None) -> ReminderConfig:
    """
    Read configuration from environment variables.

    Args:
        environ: Variables to read (default: os.environ)

    Returns:
        ReminderConfig

    Raises:
        ConfigError: If required variables are missing or invalid
    """
    if environ is None:
        environ = os.environ

    missing = [name for name in REQUIRED_VARIABLES if not environ.get(name)]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    api_key = environ.get('GOOGLE_API_KEY') or None
    credentials_file = environ.get('GOOGLE_CREDENTIALS_FILE') or None
    if not api_key and not credentials_file:
        raise ConfigError(
            "One of GOOGLE_API_KEY or GOOGLE_CREDENTIALS_FILE is required"
        )

    required = {
        field_name: environ[name]
        for name, field_name in REQUIRED_VARIABLES.items()
    }
    return ReminderConfig(
        google_api_key=api_key,
        google_credentials_file=credentials_file,
        dev_error_channel_id=environ.get('DEV_ERROR_CHANNEL_ID') or None,
        refresh_interval=_int_setting(environ, 'REFRESH_INTERVAL_SECONDS', 3600),
        timeout_seconds=_int_setting(environ, 'TIMEOUT_SECONDS', 30),
        log_level=environ.get('LOG_LEVEL', 'INFO'),
        **required
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Post daily review event reminders to Discord.'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='send one reminder now and exit instead of waiting for midnight'
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Start the reminder service.

    Returns:
        Process exit code
    """
    args = parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        setup_logging()
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        return 2

    setup_logging(config.log_level)
    logger = logging.getLogger(__name__)
    logger.info(
        "Reminder service starting",
        extra={
            'sheet_name': config.sheet_name,
            'refresh_interval': config.refresh_interval,
            'timeout_seconds': config.timeout_seconds
        }
    )

    discord = DiscordClient(config.discord_token, timeout=config.timeout_seconds)
    error_reporter = ErrorReporter(discord, config.dev_error_channel_id)
    sheet = ReviewEventSheet(
        GoogleSheetsClient(
            config.spreadsheet_id,
            config.sheet_name,
            api_key=config.google_api_key,
            service_account_file=config.google_credentials_file
        ),
        refresh_interval=config.refresh_interval
    )

    try:
        scheduler = initialize_reminders(
            sheet=sheet,
            discord=discord,
            error_reporter=error_reporter,
            guild_id=config.guild_id,
            channel_id=config.channel_id,
            role_id=config.role_id
        )
    except ReminderSetupError as e:
        logger.error(f"Reminders not scheduled: {e}")
        return 1
    except Exception as e:
        logger.error(
            f"Reminder setup failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        error_reporter.report(e)
        return 1

    if args.once:
        scheduler.fire()
        return 0

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, stopping")
        scheduler.stop()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    scheduler.run_forever()
    return 0


if __name__ == '__main__':
    sys.exit(main())
