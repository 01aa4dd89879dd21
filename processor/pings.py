"""Resolve free-text host names to chat mentions."""
from typing import Iterable, Optional, Sequence

from processor.models import RosterMember


def resolve_name(
    roster: Sequence[RosterMember],
    name: str
) -> Optional[RosterMember]:
    """
    Find the roster member a free-text host name refers to.

    Scans the roster in order and returns the first member whose display
    name starts with ``name``, ignoring case. Ambiguous prefixes resolve to
    whichever member comes first.

    Args:
        roster: Members of the host role
        name: Host name as typed in the sheet

    Returns:
        Matching member, or None
    """
    prefix = name.lower()
    for member in roster:
        if member.display_name.lower().startswith(prefix):
            return member
    return None


def build_pings(roster: Sequence[RosterMember], names: Iterable[str]) -> str:
    """
    Render host names as space-separated pings.

    Resolved names become mentions, unresolved ones stay as ``@name``.
    Names listed twice are pinged twice.
    """
    pings = []
    for name in names:
        member = resolve_name(roster, name)
        pings.append(member.mention if member else f"@{name}")
    return ' '.join(pings)
