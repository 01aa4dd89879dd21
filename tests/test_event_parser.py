"""Unit tests for ReviewEventParser."""
from datetime import date

import pytest

from processor.event_parser import ContactRow, DetailRow, ReviewEventParser
from processor.models import Professor

TODAY = date(2024, 2, 20)

HEADER = [
    'Event', 'Professor', 'Email Date', 'Email Sent', 'Publicity Date',
    'Publicity Sent', 'Event Date', 'Test Date', 'Location', 'Lead Hosts',
    'Hosts', 'Backup Hosts', 'Expected Attendance'
]


def make_rows(name='CSE 30 Midterm Review', **overrides):
    """Build the two physical rows of one event."""
    row1 = [
        name, 'smith@example.edu', '2/20', 'FALSE', '2/22', 'TRUE',
        '3/1', '3/4', 'CSE 1202', 'Alice', 'Bob', 'Carol', '40'
    ]
    row2 = [
        '', 'Dr. Smith', '', '', '', '', 'Friday', 'Monday', '',
        'Dan', '', 'Eve'
    ]
    for key, value in overrides.items():
        which, index = key.split('_')
        (row1 if which == 'r1' else row2)[int(index)] = value
    return row1, row2


@pytest.fixture
def parser():
    return ReviewEventParser()


class TestParseEntry:
    """Test cases for merging two rows into one event."""

    def test_parses_all_fields(self, parser):
        """Test field derivation from both rows."""
        row1, row2 = make_rows()

        event = parser.parse_entry(row1, row2, TODAY)

        assert event.name == 'CSE 30 Midterm Review'
        assert event.professor == Professor(name='Dr. Smith', email='smith@example.edu')
        assert event.email_date == date(2024, 2, 20)
        assert event.email_done is False
        assert event.publicity_date == date(2024, 2, 22)
        assert event.publicity_done is True
        assert event.event_date == date(2024, 3, 1)
        assert event.test_date == date(2024, 3, 4)
        assert event.location == 'CSE 1202'
        assert event.lead_hosts == ['Alice', 'Dan']
        assert event.hosts == ['Bob']
        assert event.backup_hosts == ['Carol', 'Eve']
        assert event.expected_attendance == 40

    def test_checkbox_is_case_sensitive(self, parser):
        """Test that only the exact TRUE token counts as checked."""
        row1, row2 = make_rows(r1_3='true', r1_5='True')

        event = parser.parse_entry(row1, row2, TODAY)

        assert event.email_done is False
        assert event.publicity_done is False

    def test_blank_and_unparseable_fields_are_omitted(self, parser):
        """Test that blank optional fields come back as None."""
        row1, row2 = make_rows(r1_2='', r1_4='TBD', r1_6='', r1_7='??', r1_12='lots')

        event = parser.parse_entry(row1, row2, TODAY)

        assert event is not None
        assert event.email_date is None
        assert event.publicity_date is None
        assert event.event_date is None
        assert event.test_date is None
        assert event.expected_attendance is None

    def test_negative_attendance_is_omitted(self, parser):
        """Test that attendance must be a non-negative integer."""
        row1, row2 = make_rows(r1_12='-5')

        assert parser.parse_entry(row1, row2, TODAY).expected_attendance is None

    def test_whitespace_hosts_are_dropped(self, parser):
        """Test that blank host cells are removed, order preserved."""
        row1, row2 = make_rows(r1_9='  ', r2_9='Dan', r1_10='', r2_10='Frank')

        event = parser.parse_entry(row1, row2, TODAY)

        assert event.lead_hosts == ['Dan']
        assert event.hosts == ['Frank']

    def test_cells_are_trimmed(self, parser):
        """Test that names are trimmed by validation."""
        row1, row2 = make_rows(name='  Math 20A Review  ', r2_1=' Dr. Lee ')

        event = parser.parse_entry(row1, row2, TODAY)

        assert event.name == 'Math 20A Review'
        assert event.professor.name == 'Dr. Lee'

    def test_invalid_first_row_rejects_record(self, parser):
        """Test that a malformed first row discards the whole record."""
        row1, row2 = make_rows()
        row1[8] = None

        assert parser.parse_entry(row1, row2, TODAY) is None

    def test_invalid_second_row_rejects_record(self, parser):
        """Test that a malformed second row discards the whole record."""
        row1, row2 = make_rows()
        row2[1] = 42

        assert parser.parse_entry(row1, row2, TODAY) is None

    def test_short_rows_are_padded(self, parser):
        """Test that rows missing trailing cells still parse."""
        event = parser.parse_entry(['Quick Review', 'a@example.edu'], [], TODAY)

        assert event.name == 'Quick Review'
        assert event.professor.name == ''
        assert event.lead_hosts == []
        assert event.expected_attendance is None


class TestRowViews:
    """Test cases for the named row views."""

    def test_professor_column_differs_per_row(self):
        """Test that the shared column maps to email then name."""
        row1, row2 = make_rows()

        details = DetailRow.from_cells(row1)
        contact = ContactRow.from_cells(row2)

        assert details.professor_email == 'smith@example.edu'
        assert contact.professor_name == 'Dr. Smith'


class TestParseRows:
    """Test cases for parsing a whole sheet."""

    def test_skips_header_and_pairs_rows(self, parser):
        """Test that events are read two rows at a time after the header."""
        a1, a2 = make_rows('Review A')
        b1, b2 = make_rows('Review B')

        events = list(parser.parse_rows([HEADER, a1, a2, b1, b2], TODAY))

        assert [event.name for event in events] == ['Review A', 'Review B']

    def test_stops_at_first_empty_row(self, parser):
        """Test that records after the comments marker are ignored."""
        a1, a2 = make_rows('Review A')
        b1, b2 = make_rows('Review B')

        rows = [HEADER, a1, a2, [], ['Comments: see below'], b1, b2]
        events = list(parser.parse_rows(rows, TODAY))

        assert [event.name for event in events] == ['Review A']

    def test_skips_malformed_pairs(self, parser):
        """Test that a bad pair is dropped and parsing continues."""
        a1, a2 = make_rows('Review A')
        b1, b2 = make_rows('Review B')
        b2[0] = None
        c1, c2 = make_rows('Review C')

        events = list(parser.parse_rows([HEADER, a1, a2, b1, b2, c1, c2], TODAY))

        assert [event.name for event in events] == ['Review A', 'Review C']

    def test_missing_trailing_second_row(self, parser):
        """Test that a final unpaired row is read with an empty partner."""
        a1, _ = make_rows('Review A')

        events = list(parser.parse_rows([HEADER, a1], TODAY))

        assert len(events) == 1
        assert events[0].professor.name == ''

    def test_header_only(self, parser):
        """Test that a sheet with no events yields nothing."""
        assert list(parser.parse_rows([HEADER], TODAY)) == []
        assert list(parser.parse_rows([], TODAY)) == []
