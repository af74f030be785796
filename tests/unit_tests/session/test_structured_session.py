"""
Unit tests for the StructuredSession facade.
"""
import gc
import threading

import pytest

from chunkwise.config import get_config
from chunkwise.scanner import Unit
from chunkwise.session.errors import (
    DecodeError,
    InvalidModeError,
    ModeMismatchError,
    SessionStoppedError,
    SessionTimeoutError,
)
from chunkwise.session.mode import Mode
from chunkwise.session.requests import Overlap
from chunkwise.session.state import SessionState
from chunkwise.session.status import SessionStatus
from chunkwise.session.structured_session import StructuredSession


class TestSessionLifecycle:

    def test_start_in_each_mode(self, start_session):
        assert start_session("binary").mode is Mode.BINARY
        assert start_session("text").mode is Mode.TEXT
        assert start_session("unicode").mode is Mode.TEXT

    def test_invalid_mode_creates_nothing(self):
        with pytest.raises(InvalidModeError):
            StructuredSession.start("utf8")

    def test_unknown_encoding_is_rejected_up_front(self):
        with pytest.raises(LookupError):
            StructuredSession("text", encoding="no-such-codec")

    def test_status_transitions(self):
        session = StructuredSession("binary", name="lifecycle")
        assert session.status is SessionStatus.CREATED
        session.run()
        assert session.status is SessionStatus.RUNNING
        assert session.is_running is True
        session.stop()
        assert session.status is SessionStatus.STOPPED

    def test_operations_after_stop_raise(self, binary_session):
        binary_session.stop()
        with pytest.raises(SessionStoppedError):
            binary_session.write(b"x")
        with pytest.raises(SessionStoppedError):
            binary_session.read_through(b"\n")

    def test_stopped_session_cannot_restart(self, binary_session):
        binary_session.stop()
        with pytest.raises(SessionStoppedError):
            binary_session.run()

    def test_context_manager_stops(self):
        with StructuredSession("text", name="ctx") as session:
            session.write("a\n")
            assert session.read_through("\n") == "a\n"
        assert session.status is SessionStatus.STOPPED

    def test_collected_session_stops_its_worker(self):
        session = StructuredSession.start("binary", name="collected")
        session.write(b"left behind")
        worker = session._worker
        del session
        gc.collect()
        assert worker._wait_for_thread(5.0) is True
        assert worker.is_alive() is False

    def test_repr(self):
        session = StructuredSession("binary", name="shown")
        assert repr(session) == "<StructuredSession name='shown' mode=binary status=created>"


class TestEnclosedReads:

    def test_incomplete_then_complete(self, text_session):
        text_session.write("<elem>foo</elem")
        assert text_session.read_across("<elem>", "</elem>") == ""
        text_session.write(">")
        assert text_session.read_across("<elem>", "</elem>") == "<elem>foo</elem>"

    def test_nested_and_overlap_ignoring_variants(self, start_session):
        data = "<elem>foo<elem>bar</elem></elem>baz"
        expectations = [
            ("read_across", "<elem>foo<elem>bar</elem></elem>", "baz"),
            ("read_between", "foo<elem>bar</elem>", "baz"),
            ("read_across_ignoring_overlap", "<elem>foo<elem>bar</elem>", "</elem>baz"),
            ("read_between_ignoring_overlap", "foo<elem>bar", "</elem>baz"),
        ]
        for method, match, remainder in expectations:
            session = start_session("text")
            session.write(data)
            assert getattr(session, method)("<elem>", "</elem>") == match
            assert session.snapshot().data == remainder.encode("utf-8")

    def test_read_enclosed_keywords(self, text_session):
        text_session.write("[a[b]]")
        assert text_session.read_enclosed("[", "]", inclusive=False, overlap="ignore") == "a[b"
        assert text_session.snapshot().data == b"]"

    def test_sequence_of_elements(self, binary_session):
        binary_session.write(b"<e>1</e><e>2</e><e>3")
        assert binary_session.read_between(b"<e>", b"</e>") == b"1"
        assert binary_session.read_between(b"<e>", b"</e>") == b"2"
        assert binary_session.read_between(b"<e>", b"</e>") == b""
        binary_session.write(b"</e>")
        assert binary_session.read_between(b"<e>", b"</e>") == b"3"

    def test_mixed_marker_kinds(self, text_session):
        with pytest.raises(TypeError):
            text_session.read_across("<e>", b"</e>")


class TestMeasuredReads:

    def test_binary_bytes(self, binary_session):
        binary_session.write(bytes([23, 45, 67]))
        assert binary_session.read_measured(Unit.BYTES, 4) == b""
        binary_session.write(bytes([89]))
        assert binary_session.read_measured(Unit.BYTES, 3) == bytes([23, 45, 67])
        assert binary_session.read_measured("bytes", 1) == bytes([89])

    def test_text_graphemes(self, text_session):
        text_session.write("\r\nfoo")
        assert text_session.read_measured(Unit.GRAPHEMES, 5) == ""
        text_session.write("\tbar")
        assert text_session.read_measured(Unit.GRAPHEMES, 5) == "\r\nfoo\t"

    def test_text_bytes_counts_encoded_bytes(self, text_session):
        text_session.write("éa")
        assert text_session.read_measured(Unit.BYTES, 1) == ""
        assert text_session.read_measured(Unit.BYTES, 2) == "é"

    def test_graphemes_need_text_session(self, binary_session):
        binary_session.write(b"abc")
        with pytest.raises(ModeMismatchError):
            binary_session.read_measured(Unit.GRAPHEMES, 1)
        assert binary_session.snapshot().data == b"abc"

    def test_zero_count_reads_nothing(self, binary_session):
        binary_session.write(b"abc")
        assert binary_session.read_measured(Unit.BYTES, 0) == b""
        assert binary_session.snapshot().data == b"abc"

    @pytest.mark.parametrize("count, error", [(-1, ValueError), (1.0, TypeError)])
    def test_invalid_count(self, binary_session, count, error):
        with pytest.raises(error):
            binary_session.read_measured(Unit.BYTES, count)


class TestTerminatedReads:

    def test_through_and_to(self, text_session):
        text_session.write("foo<br/>bar<br/>")
        assert text_session.read_to("<br/>") == "foo"
        assert text_session.read_through("<br/>") == "<br/>"
        assert text_session.read_terminated("<br/>", inclusive=True) == "bar<br/>"
        assert text_session.read_through("<br/>") == ""

    def test_missing_terminator(self, binary_session):
        binary_session.write(bytes([1, 2, 3, 255, 255]))
        assert binary_session.read_to(bytes([255, 255, 255])) == b""


class TestModeIsolation:

    def test_text_markers_on_binary_session(self, binary_session):
        binary_session.write(b"<a>x</a>")
        with pytest.raises(ModeMismatchError, match="In binary mode"):
            binary_session.read_across("<a>", "</a>")
        assert binary_session.read_across(b"<a>", b"</a>") == b"<a>x</a>"

    def test_binary_markers_on_text_session(self, text_session):
        text_session.write("x\n")
        with pytest.raises(ModeMismatchError, match="In text mode"):
            text_session.read_through(b"\n")
        assert text_session.read_through("\n") == "x\n"

    def test_text_write_to_binary_session(self, binary_session):
        with pytest.raises(ModeMismatchError):
            binary_session.write("text")
        assert binary_session.snapshot().data == b""

    def test_bytes_write_to_text_session(self, text_session):
        text_session.write("é".encode("utf-8"))
        assert text_session.read_measured(Unit.GRAPHEMES, 1) == "é"


class TestDecodeErrors:

    def test_split_character_then_completed(self, text_session):
        smiley = "\U0001F600".encode("utf-8")
        text_session.write(b"<e>" + smiley[:1])
        with pytest.raises(DecodeError) as exc_info:
            text_session.read_across("<e>", "</e>")
        assert exc_info.value.incomplete is True
        text_session.write(smiley[1:] + b"</e>")
        assert text_session.read_across("<e>", "</e>") == "<e>\U0001F600</e>"

    def test_invalid_bytes_keep_failing(self, text_session):
        text_session.write(b"\xffabc")
        for _ in range(2):
            with pytest.raises(DecodeError) as exc_info:
                text_session.read_measured(Unit.BYTES, 1)
            assert exc_info.value.incomplete is False

    def test_other_encoding(self, start_session):
        session = start_session("text", encoding="utf-16-le")
        session.write("ab;")
        assert session.read_through(";") == "ab;"

    def test_two_byte_encoding_across_writes(self, start_session):
        session = start_session("text", encoding="utf-16-le")
        session.write("ab")
        session.write("cd")
        assert session.read_measured(Unit.GRAPHEMES, 4) == "abcd"
        session.write("ab")
        assert session.read_measured(Unit.BYTES, 2) == "a"
        assert session.read_measured(Unit.BYTES, 2) == "b"

    @pytest.mark.parametrize("encoding", ["utf-16", "utf-32", "utf-8-sig"])
    def test_byte_order_marked_encoding_is_rejected(self, encoding):
        with pytest.raises(ValueError):
            StructuredSession("text", encoding=encoding)


class TestState:

    def test_snapshot(self, text_session):
        text_session.write("abc")
        assert text_session.snapshot() == SessionState(Mode.TEXT, b"abc", "utf-8")

    def test_replace_state(self, text_session):
        text_session.write("abc")
        text_session.replace_state(SessionState(Mode.TEXT, b"xyz"))
        assert text_session.read_measured(Unit.BYTES, 3) == "xyz"

    def test_replace_state_requires_state(self, text_session):
        with pytest.raises(TypeError):
            text_session.replace_state(b"xyz")

    def test_from_state(self):
        state = SessionState(Mode.BINARY, b"1;2;")
        session = StructuredSession.from_state(state, name="restored")
        try:
            assert session.mode is Mode.BINARY
            assert session.read_through(b";") == b"1;"
        finally:
            session.stop()

    def test_update_state(self, binary_session):
        binary_session.write(b"abc")
        reply = binary_session.update_state(lambda state: (SessionState(state.mode, state.data.upper()), len(state.data)))
        assert reply == 3
        assert binary_session.snapshot().data == b"ABC"


class TestTimeouts:

    def test_slow_request_times_out_for_caller(self, binary_session):
        started = threading.Event()
        gate = threading.Event()

        def block(state):
            started.set()
            gate.wait(5.0)
            return None, None

        blocker = threading.Thread(target=binary_session.update_state, args=(block,))
        blocker.start()
        assert started.wait(5.0)
        try:
            with pytest.raises(SessionTimeoutError, match="SnapshotRequest"):
                binary_session.snapshot(timeout=0.05)
        finally:
            gate.set()
            blocker.join()

    def test_default_timeout_comes_from_config(self, binary_session):
        get_config().set("default_timeout", 1.5)
        assert binary_session._resolve_timeout(None) == 1.5
        assert binary_session._resolve_timeout(0.2) == 0.2


class TestWriteFailures:

    def test_failed_write_is_logged(self, binary_session, mocker):
        mocker.patch.object(binary_session._dispatcher, "dispatch", side_effect=[MemoryError("full"), None])
        log_error = mocker.patch("chunkwise.session.structured_session.logger.error")
        binary_session.write(b"x")
        # The next request is served after the failed write and its callback.
        binary_session.write(b"y")
        binary_session.stop()
        log_error.assert_called_once()
        assert "full" in log_error.call_args[0][0]
