"""Tests for stream module."""

import io
import threading

import pytest

from shellpipe.stream import (
    ChainReader,
    IterReader,
    ManagedReader,
    TeeReader,
    channel,
    encode,
    scan_lines,
)


class CountingSource(io.BytesIO):
    """BytesIO that counts close() calls."""

    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        super().close()


class TestManagedReader:
    """Tests for ManagedReader."""

    def test_closes_source_at_end_of_stream(self) -> None:
        """Test reading to the end closes the source once."""
        source = CountingSource(b"hello world")
        reader = ManagedReader(source)
        assert reader.read() == b"hello world"
        assert source.close_calls == 1
        assert reader.closed

    def test_read_after_release_is_empty(self) -> None:
        """Test reading again returns nothing and does not close again."""
        source = CountingSource(b"data")
        reader = ManagedReader(source)
        reader.read()
        assert reader.read() == b""
        assert reader.read(10) == b""
        reader.close()
        assert source.close_calls == 1

    def test_explicit_close_before_end(self) -> None:
        """Test close() releases an unfinished source exactly once."""
        source = CountingSource(b"abcdef")
        reader = ManagedReader(source)
        assert reader.read(2) == b"ab"
        reader.close()
        reader.close()
        assert source.close_calls == 1
        assert reader.read(2) == b""

    def test_concurrent_close(self) -> None:
        """Test racing closes still close the source once."""
        source = CountingSource(b"x")
        reader = ManagedReader(source)
        threads = [threading.Thread(target=reader.close) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert source.close_calls == 1

    def test_no_source(self) -> None:
        """Test a reader without a source is an empty stream."""
        reader = ManagedReader()
        assert reader.read() == b""
        assert reader.read(5) == b""
        reader.close()

    def test_close_source_disabled(self) -> None:
        """Test the source is left open when close_source is False."""
        source = CountingSource(b"keep")
        reader = ManagedReader(source, close_source=False)
        assert reader.read() == b"keep"
        assert source.close_calls == 0

    def test_read_respects_size(self) -> None:
        """Test read(n) pulls at most n bytes from the source."""
        source = io.BytesIO(b"abcdef")
        reader = ManagedReader(source)
        assert reader.read(2) == b"ab"
        assert source.read() == b"cdef"

    def test_readinto(self) -> None:
        """Test readinto fills a buffer."""
        reader = ManagedReader(io.BytesIO(b"abc"))
        buffer = bytearray(8)
        assert reader.readinto(buffer) == 3
        assert bytes(buffer[:3]) == b"abc"


class TestChannel:
    """Tests for the rendezvous channel."""

    def test_write_waits_for_reader(self) -> None:
        """Test a write returns only after every byte is consumed."""
        reader, writer = channel()
        done = threading.Event()

        def produce() -> None:
            writer.write(b"hello")
            done.set()

        thread = threading.Thread(target=produce)
        thread.start()
        assert reader.read(2) == b"he"
        assert not done.is_set()
        assert reader.read(10) == b"llo"
        thread.join(timeout=5)
        assert done.is_set()

    def test_close_writer_gives_eof(self) -> None:
        """Test closing the write end ends the stream."""
        reader, writer = channel()

        def produce() -> None:
            writer.write(b"data")
            writer.close()

        threading.Thread(target=produce).start()
        assert reader.read() == b"data"
        assert reader.read(1) == b""

    def test_write_after_reader_closed(self) -> None:
        """Test writing to a channel whose reader is closed fails."""
        reader, writer = channel()
        reader.close()
        with pytest.raises(BrokenPipeError):
            writer.write(b"x")

    def test_blocked_writer_released_by_reader_close(self) -> None:
        """Test closing the reader fails a write that is waiting."""
        reader, writer = channel()
        errors: list[BaseException] = []

        def produce() -> None:
            try:
                writer.write(b"never read")
            except BrokenPipeError as e:
                errors.append(e)

        thread = threading.Thread(target=produce)
        thread.start()
        reader.close()
        thread.join(timeout=5)
        assert len(errors) == 1

    def test_empty_write(self) -> None:
        """Test an empty write returns without a reader."""
        _, writer = channel()
        assert writer.write(b"") == 0

    def test_zero_size_read_does_not_wait(self) -> None:
        """Test read(0) returns at once while the writer is idle."""
        reader, _ = channel()
        assert reader.read(0) == b""

    def test_close_with_error_after_data(self) -> None:
        """Test the close error is raised only after the written data is read."""
        reader, writer = channel()
        failure = RuntimeError("stage failed")

        def produce() -> None:
            writer.write(b"data")
            writer.close_with_error(failure)

        thread = threading.Thread(target=produce)
        thread.start()
        assert reader.read(10) == b"data"
        thread.join(timeout=5)
        with pytest.raises(RuntimeError) as exc_info:
            reader.read(10)
        assert exc_info.value is failure

    def test_close_after_close_with_error_keeps_error(self) -> None:
        """Test a plain close does not clear an earlier close error."""
        reader, writer = channel()
        writer.close_with_error(ValueError("bad"))
        writer.close()
        with pytest.raises(ValueError):
            reader.read(1)

    def test_closed_reader_ignores_close_error(self) -> None:
        """Test a closed read end reports end-of-stream, not the error."""
        reader, writer = channel()
        reader.close()
        assert writer.reader_closed
        writer.close_with_error(ValueError("bad"))
        assert reader.read(1) == b""


class TestScanLines:
    """Tests for scan_lines."""

    def test_lines(self) -> None:
        """Test splitting on newlines, with and without a final terminator."""
        assert list(scan_lines(io.BytesIO(b"a\nb\r\nc"))) == ["a", "b", "c"]

    def test_empty(self) -> None:
        """Test empty input has no lines."""
        assert list(scan_lines(io.BytesIO(b""))) == []

    def test_single_newline(self) -> None:
        """Test a lone newline is one empty line."""
        assert list(scan_lines(io.BytesIO(b"\n"))) == [""]

    def test_lines_across_chunks(self) -> None:
        """Test lines longer than the read size are reassembled."""
        data = b"first line\nsecond\n\nlast"
        assert list(scan_lines(io.BytesIO(data), chunk_size=3)) == [
            "first line",
            "second",
            "",
            "last",
        ]

    def test_invalid_utf8_round_trip(self) -> None:
        """Test undecodable bytes survive decode and encode."""
        (line,) = scan_lines(io.BytesIO(b"caf\xe9\n"))
        assert encode(line) == b"caf\xe9"


class TestIterReader:
    """Tests for IterReader."""

    def test_read_sizes(self) -> None:
        """Test chunks are split to honour the requested size."""
        reader = IterReader([b"abc", b"de"])
        assert reader.read(2) == b"ab"
        assert reader.read(2) == b"c"
        assert reader.read(5) == b"de"
        assert reader.read(5) == b""

    def test_close_callback_once(self) -> None:
        """Test on_close runs once."""
        calls = []
        reader = IterReader([b"x"], on_close=lambda: calls.append(1))
        reader.close()
        reader.close()
        assert calls == [1]
        assert reader.read(1) == b""


class TestChainAndTee:
    """Tests for ChainReader and TeeReader."""

    def test_chain(self) -> None:
        """Test readers are read in order."""
        reader = ChainReader([io.BytesIO(b"one\n"), io.BytesIO(b""), io.BytesIO(b"two\n")])
        assert reader.read() == b"one\ntwo\n"

    def test_tee(self) -> None:
        """Test everything read is copied to each writer."""
        first, second = io.BytesIO(), io.BytesIO()
        reader = TeeReader(io.BytesIO(b"copy me"), [first, second])
        assert reader.read() == b"copy me"
        assert first.getvalue() == b"copy me"
        assert second.getvalue() == b"copy me"
