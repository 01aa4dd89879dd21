"""Discord REST client for the reminder channel and role roster."""
import logging
from typing import Any, Dict, List, Optional, Union

import requests

from processor.models import RosterMember

logger = logging.getLogger(__name__)

# GUILD_TEXT, GUILD_ANNOUNCEMENT, ANNOUNCEMENT_THREAD, PUBLIC_THREAD,
# PRIVATE_THREAD, and the text chat of GUILD_VOICE and GUILD_STAGE_VOICE.
TEXT_CHANNEL_TYPES = {0, 5, 10, 11, 12, 2, 13}


class DiscordError(Exception):
    """Raised when the Discord API returns an error response."""

    def __init__(self, status: int, message: str):
        super().__init__(f"Discord API error {status}: {message}")
        self.status = status
        self.message = message


class DiscordClient:
    """Minimal Discord bot client over the REST API."""

    API_BASE = "https://discord.com/api/v10"
    MAX_MESSAGE_LENGTH = 2000
    MEMBERS_PAGE_SIZE = 1000

    def __init__(
        self,
        token: str,
        api_base: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Discord client.

        Args:
            token: Bot token
            api_base: API root URL (default: Discord v10)
            timeout: HTTP request timeout in seconds (default: 30)
            session: Optional pre-built session (for testing)
        """
        self.api_base = (api_base or self.API_BASE).rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f"Bot {token}",
            'User-Agent': 'review-event-reminders (requests)'
        })

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Send an API request and decode the JSON response.

        Raises:
            DiscordError: If Discord answers with an error status
            requests.RequestException: On network failures
        """
        response = self.session.request(
            method,
            f"{self.api_base}{path}",
            timeout=self.timeout,
            **kwargs
        )
        if response.status_code >= 400:
            try:
                message = response.json().get('message', response.text)
            except ValueError:
                message = response.text
            raise DiscordError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def fetch_channel(self, channel_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a channel, or None if it does not exist."""
        try:
            return self._request('GET', f"/channels/{channel_id}")
        except DiscordError as e:
            if e.status == 404:
                return None
            raise

    @staticmethod
    def is_text_channel(channel: Optional[Dict[str, Any]]) -> bool:
        return channel is not None and channel.get('type') in TEXT_CHANNEL_TYPES

    def fetch_role(self, guild_id: str, role_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a guild role, or None if the guild has no such role."""
        roles = self._request('GET', f"/guilds/{guild_id}/roles")
        for role in roles:
            if role.get('id') == role_id:
                return role
        return None

    def fetch_role_members(self, guild_id: str, role_id: str) -> List[RosterMember]:
        """
        List every guild member holding a role.

        Members are returned in the order Discord pages them (by user ID).

        Args:
            guild_id: Guild to search
            role_id: Role members must hold

        Returns:
            List of RosterMember objects
        """
        members = []
        after = '0'

        while True:
            page = self._request(
                'GET',
                f"/guilds/{guild_id}/members",
                params={'limit': self.MEMBERS_PAGE_SIZE, 'after': after}
            )
            for member in page:
                if role_id in member.get('roles', []):
                    members.append(self._to_roster_member(member))

            if len(page) < self.MEMBERS_PAGE_SIZE:
                break
            after = page[-1]['user']['id']

        logger.info(f"Fetched {len(members)} members with role {role_id}")
        return members

    def _to_roster_member(self, member: Dict[str, Any]) -> RosterMember:
        """Convert a guild member payload, preferring the guild nickname."""
        user = member.get('user', {})
        display_name = (
            member.get('nick')
            or user.get('global_name')
            or user.get('username', '')
        )
        return RosterMember(id=user['id'], display_name=display_name)

    def send_message(self, channel_id: str, content: str) -> int:
        """
        Post a message, splitting it on line breaks if it is too long.

        Args:
            channel_id: Target channel
            content: Message text

        Returns:
            Number of messages posted
        """
        chunks = split_message(content, self.MAX_MESSAGE_LENGTH)
        for chunk in chunks:
            self._request(
                'POST',
                f"/channels/{channel_id}/messages",
                json={'content': chunk}
            )
        logger.info(f"Sent {len(chunks)} message(s) to channel {channel_id}")
        return len(chunks)


def split_message(content: str, limit: int) -> List[str]:
    """
    Split text into chunks of at most ``limit`` characters.

    Splits on line boundaries; a single line longer than ``limit`` is cut.
    """
    chunks = []
    current = ''
    for line in content.split('\n'):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ''
            chunks.append(line[:limit])
            line = line[limit:]

        candidate = f"{current}\n{line}" if current else line
        if current and len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate

    if current:
        chunks.append(current)
    return chunks


class ErrorReporter:
    """Reports operational errors to the developer channel."""

    def __init__(self, client: Optional[DiscordClient], channel_id: Optional[str]):
        self.client = client
        self.channel_id = channel_id

    def report(self, error: Union[BaseException, str]) -> bool:
        """
        Post an error report.

        Never raises; delivery failures are logged.

        Args:
            error: Exception or message to report

        Returns:
            True if the report was posted
        """
        if isinstance(error, BaseException):
            text = f"`{type(error).__name__}: {error}`"
        else:
            text = error

        if self.client is None or not self.channel_id:
            logger.warning(f"No error channel configured, not reporting: {text}")
            return False

        try:
            self.client.send_message(self.channel_id, text)
            return True
        except Exception as e:
            logger.error(f"Failed to report error to channel: {e}", exc_info=True)
            return False
