"""
Unit tests for the ScanCursor class.
"""
from chunkwise.scanner.scan_cursor import ScanCursor


class TestScanCursorBasics:
    """Tests for basic ScanCursor operations."""

    def test_initial_empty_sequence(self):
        """Cursor over empty data starts at 0 with nothing to read."""
        cursor = ScanCursor("")
        assert cursor.get_position() == 0
        assert cursor.has_more() is False
        assert cursor.remaining() == ""

    def test_initial_with_text(self):
        cursor = ScanCursor("hello")
        assert cursor.get_position() == 0
        assert cursor.has_more() is True
        assert cursor.remaining() == "hello"

    def test_initial_position_is_clamped(self):
        cursor = ScanCursor("abc", position=10)
        assert cursor.get_position() == 3


class TestScanCursorNavigation:
    """Tests for cursor navigation."""

    def test_advance_by_within_data(self):
        cursor = ScanCursor("abc")
        cursor.advance_by(1)
        assert cursor.remaining() == "bc"
        assert cursor.get_position() == 1

    def test_advance_by_past_end(self):
        """Advance by past end clamps to data length."""
        cursor = ScanCursor(b"abc")
        cursor.advance_by(100)
        assert cursor.get_position() == 3
        assert cursor.has_more() is False

    def test_set_position_negative(self):
        cursor = ScanCursor("hello")
        cursor.set_position(-5)
        assert cursor.get_position() == 0


class TestScanCursorMarkers:
    """Tests for marker lookups."""

    def test_starts_with_at_position(self):
        cursor = ScanCursor("foo<br/>bar")
        assert cursor.starts_with("foo") is True
        cursor.set_position(3)
        assert cursor.starts_with("<br/>") is True
        assert cursor.starts_with("bar") is False

    def test_find_from_position(self):
        """Find returns absolute indices and ignores occurrences behind the cursor."""
        cursor = ScanCursor(b"ab|cd|ef")
        assert cursor.find(b"|") == 2
        cursor.set_position(3)
        assert cursor.find(b"|") == 5
        cursor.set_position(6)
        assert cursor.find(b"|") == -1

    def test_consumed_and_remaining(self):
        cursor = ScanCursor("hello world")
        cursor.advance_by(6)
        assert cursor.consumed() == "hello "
        assert cursor.consumed(2) == "llo "
        assert cursor.remaining() == "world"
