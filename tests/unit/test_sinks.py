"""Tests for sinks."""

import io
from pathlib import Path

from shellpipe import Pipe, SinkResult, echo, file
from shellpipe.stream import Reader, Writer


def failing_stage(reader: Reader, writer: Writer) -> None:
    writer.write(b"partial\n")
    raise RuntimeError("stage failed")


class TestTextSinks:
    """Tests for bytes, string, slice and count_lines."""

    def test_string(self) -> None:
        """Test reading the stream as text."""
        result = echo("hello world").string()
        assert isinstance(result, SinkResult)
        assert result.value == "hello world"
        assert result.error is None

    def test_bytes(self) -> None:
        """Test reading the stream as bytes, including invalid UTF-8."""
        pipe = Pipe(io.BytesIO(b"\xff\xfe raw"))
        assert pipe.bytes() == (b"\xff\xfe raw", None)

    def test_string_with_stage_error(self) -> None:
        """Test partial output comes back with the stage's error."""
        out, err = echo("x").filter(failing_stage).string()
        assert out == "partial\n"
        assert isinstance(err, RuntimeError)

    def test_count_lines(self) -> None:
        """Test counting lines with and without a final newline."""
        assert echo("a\nb\nc\n").count_lines() == (3, None)
        assert echo("a\nb\nc").count_lines() == (3, None)
        assert echo("").count_lines() == (0, None)

    def test_slice(self) -> None:
        """Test lines are returned without terminators."""
        assert echo("1\n2\n3\n").slice() == (["1", "2", "3"], None)

    def test_slice_edge_cases(self) -> None:
        """Test empty input and a single newline."""
        assert echo("").slice() == ([], None)
        assert echo("\n").slice() == ([""], None)

    def test_sink_closes_reader(self) -> None:
        """Test a sink closes the source when it is done."""
        source = io.BytesIO(b"data")
        Pipe(source).bytes()
        assert source.closed


class TestSha256Sum:
    """Tests for sha256_sum."""

    def test_sha256_sum(self) -> None:
        """Test the digest of the whole stream."""
        digest, err = echo("hello world").sha256_sum()
        assert digest == "b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"
        assert err is None

    def test_sha256_sum_empty(self) -> None:
        """Test the digest of empty input."""
        digest, _ = echo("").sha256_sum()
        assert digest == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestWriters:
    """Tests for stdout, write_file and append_file."""

    def test_stdout(self, capture: io.BytesIO) -> None:
        """Test the stream is copied to the configured writer."""
        written, err = echo("hello\n").with_stdout(capture).stdout()
        assert written == 6
        assert err is None
        assert capture.getvalue() == b"hello\n"

    def test_stdout_with_error(self, capture: io.BytesIO) -> None:
        """Test nothing is written once the pipe has an error."""
        err = RuntimeError("already failed")
        result = echo("hello").with_stdout(capture).with_error(err).stdout()
        assert result == (0, err)
        assert capture.getvalue() == b""

    def test_stdout_write_failure(self) -> None:
        """Test a failing writer is recorded."""

        class Full:
            def write(self, data: bytes) -> int:
                raise OSError("no space left on device")

        written, err = echo("x").with_stdout(Full()).stdout()
        assert written == 0
        assert isinstance(err, OSError)

    def test_write_file(self, tmp_path: Path) -> None:
        """Test writing truncates an existing file."""
        target = tmp_path / "out.txt"
        target.write_text("old contents that are longer\n")
        written, err = echo("new\n").write_file(target)
        assert (written, err) == (4, None)
        assert target.read_text() == "new\n"

    def test_append_file(self, tmp_path: Path) -> None:
        """Test appending creates or extends the file."""
        target = tmp_path / "log.txt"
        echo("one\n").append_file(target)
        written, err = echo("two\n").append_file(target)
        assert (written, err) == (4, None)
        assert target.read_text() == "one\ntwo\n"

    def test_write_file_bad_path(self, tmp_path: Path) -> None:
        """Test an unopenable destination is recorded."""
        written, err = echo("x").write_file(tmp_path / "no" / "such" / "dir" / "f")
        assert written == 0
        assert isinstance(err, FileNotFoundError)

    def test_write_file_round_trip(self, testdata: Path, tmp_path: Path) -> None:
        """Test copying a file through a pipe."""
        target = tmp_path / "copy.txt"
        file(testdata / "hello.txt").write_file(target)
        assert target.read_bytes() == b"hello world"
