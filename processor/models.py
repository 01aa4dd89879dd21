"""Data models for review event processing."""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass
class Professor:
    """Professor a review session is held for."""
    name: str
    email: str


@dataclass
class ReviewEvent:
    """Logical review event merged from two spreadsheet rows."""
    name: str
    professor: Professor
    location: str
    lead_hosts: List[str] = field(default_factory=list)
    hosts: List[str] = field(default_factory=list)
    backup_hosts: List[str] = field(default_factory=list)
    email_date: Optional[date] = None
    email_done: Optional[bool] = None
    publicity_date: Optional[date] = None
    publicity_done: Optional[bool] = None
    event_date: Optional[date] = None
    test_date: Optional[date] = None
    expected_attendance: Optional[int] = None


@dataclass
class RowValidation:
    """Result of validating one physical row."""
    success: bool
    data: List[str]
    error: Optional[str] = None


@dataclass
class RosterMember:
    """Member of the role used for host name resolution."""
    id: str
    display_name: str

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"
