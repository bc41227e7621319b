"""
StreamingPipeline and BoundedWriter tests.
"""

import io

import pytest

from sqlshift.services.sql_conversion import (
    BoundedWriter,
    BufferedPipeline,
    EmptyInput,
    InputNotFound,
    ReadError,
    StreamingPipeline,
    WriteError,
)
from sqlshift.services.sql_conversion.utils.provenance import build_header

HEADER_LINES = 4


class CountingSource:
    """Line source that records how many lines were pulled from it."""

    def __init__(self, lines):
        self._lines = list(lines)
        self.pulled = 0

    def __iter__(self):
        for line in self._lines:
            self.pulled += 1
            yield line


class FailingDestination:
    """Accepts the first *ok_writes* writes, then raises OSError."""

    def __init__(self, ok_writes=1):
        self.ok_writes = ok_writes
        self.chunks = []

    def write(self, data):
        if len(self.chunks) >= self.ok_writes:
            raise OSError(28, "No space left on device")
        self.chunks.append(data)

    def flush(self):
        pass


# =============================================================================
# BoundedWriter
# =============================================================================

class TestBoundedWriter:

    def test_write_reports_saturation(self):
        out = io.StringIO()
        writer = BoundedWriter(out, high_water_mark=10)

        assert writer.write("abc") is True
        assert writer.write("defghij") is False
        assert out.getvalue() == ""

        writer.drain()
        assert out.getvalue() == "abcdefghij"
        assert writer.pending_chars == 0
        assert writer.peak_pending == 10
        assert writer.drain_count == 1

    def test_drain_without_pending_is_noop(self):
        writer = BoundedWriter(io.StringIO())
        writer.drain()
        assert writer.drain_count == 0

    def test_drain_failure_raises_write_error(self):
        writer = BoundedWriter(FailingDestination(ok_writes=0), path="out.sql")
        writer.write("x")
        with pytest.raises(WriteError) as exc:
            writer.drain()
        assert exc.value.path == "out.sql"
        assert isinstance(exc.value.cause, OSError)
        assert writer.pending_chars == 0

    def test_discard_drops_pending(self):
        out = io.StringIO()
        writer = BoundedWriter(out)
        writer.write("lost")
        writer.discard()
        writer.drain()
        assert out.getvalue() == ""


# =============================================================================
# Stream protocol
# =============================================================================

class TestConvertStream:

    def test_header_then_lines_in_order(self):
        pipeline = StreamingPipeline()
        out = io.StringIO()
        summary = pipeline.convert_stream(io.StringIO("SELECT TOP 1 [a]\nSELECT 2\nGETDATE()\n"), out)

        lines = out.getvalue().split("\n")
        assert lines[0] == "-- Converted from SQL Server to MySQL"
        assert lines[1].startswith("-- Generated on: ")
        assert lines[2] == "-- Use with caution and verify before executing"
        assert lines[3] == ""
        assert lines[HEADER_LINES:] == ["SELECT LIMIT 1 a", "SELECT 2", "NOW()", ""]

        assert summary.success
        assert summary.lines_processed == 3
        assert summary.lines_changed == 2

    def test_last_line_without_terminator_gets_one(self):
        out = io.StringIO()
        StreamingPipeline().convert_stream(io.StringIO("a\nb"), out)
        assert out.getvalue().endswith("a\nb\n")

    def test_empty_source_writes_only_header(self):
        out = io.StringIO()
        summary = StreamingPipeline().convert_stream(io.StringIO(""), out)
        assert out.getvalue().count("\n") == HEADER_LINES
        assert summary.lines_processed == 0

    def test_progress_fires_at_interval(self):
        calls = []
        pipeline = StreamingPipeline(progress_interval=3)
        source = io.StringIO("".join(f"line {i}\n" for i in range(10)))
        pipeline.convert_stream(source, io.StringIO(), progress=calls.append)
        assert calls == [3, 6, 9]

    def test_default_progress_interval(self):
        assert StreamingPipeline().progress_interval == 10_000

    def test_pending_output_stays_bounded(self):
        hwm = 256
        lines = [f"INSERT INTO [dbo].[T] VALUES ({i}, GETDATE());" for i in range(2_000)]
        longest = max(len(line) for line in lines)

        pipeline = StreamingPipeline(high_water_mark=hwm)
        out = io.StringIO()
        pipeline.convert_stream(io.StringIO("\n".join(lines) + "\n"), out)

        writer = pipeline.last_writer
        assert writer.peak_pending <= max(len(build_header()), hwm + longest + 1)
        assert writer.drain_count > 1
        assert out.getvalue().count("NOW()") == 2_000

    def test_write_failure_stops_reading(self):
        source = CountingSource(f"SELECT {i}\n" for i in range(100))
        pipeline = StreamingPipeline(high_water_mark=1)

        with pytest.raises(WriteError):
            pipeline.convert_stream(source, FailingDestination(ok_writes=1),
                                    destination_name="out.sql")

        # header was written, the first line failed, nothing after it was pulled
        assert source.pulled == 1
        assert pipeline.last_writer.pending_chars == 0

    def test_header_write_failure_reads_nothing(self):
        source = CountingSource(["SELECT 1\n"])
        with pytest.raises(WriteError):
            StreamingPipeline().convert_stream(source, FailingDestination(ok_writes=0))
        assert source.pulled == 0


# =============================================================================
# Files
# =============================================================================

class TestConvertFile:

    def test_converts_file(self, sql_file, tmp_path):
        output = tmp_path / "out.sql"
        summary = StreamingPipeline().convert_file(str(sql_file), str(output))

        text = output.read_text(encoding="utf-8")
        assert "FROM AbpAuditLogs" in text
        assert "LIMIT 10" in text
        assert summary.lines_processed == 8
        assert summary.lines_changed == 6
        assert summary.message == (
            f"Successfully converted {sql_file} to {output} (8 lines processed, 6 lines converted)"
        )

    def test_crlf_input_is_normalised(self, tmp_path):
        source = tmp_path / "win.sql"
        source.write_bytes(b"SELECT TOP 3 [a]\r\nFROM [dbo].[t]\r\n")
        output = tmp_path / "out.sql"

        StreamingPipeline().convert_file(str(source), str(output))

        data = output.read_bytes()
        assert b"\r" not in data
        assert data.endswith(b"SELECT LIMIT 3 a\nFROM t\n")

    def test_missing_input(self, tmp_path):
        with pytest.raises(InputNotFound):
            StreamingPipeline().convert_file(str(tmp_path / "nope.sql"), str(tmp_path / "out.sql"))
        assert not (tmp_path / "out.sql").exists()

    def test_whitespace_only_input_is_empty(self, tmp_path):
        source = tmp_path / "blank.sql"
        source.write_text("\n   \n\t\n", encoding="utf-8")
        output = tmp_path / "out.sql"

        with pytest.raises(EmptyInput):
            StreamingPipeline().convert_file(str(source), str(output))
        assert not output.exists()

    def test_leading_blank_lines_are_kept(self, tmp_path):
        source = tmp_path / "padded.sql"
        source.write_text("\n\n  \nSELECT TOP 2 [a]\n", encoding="utf-8")
        output = tmp_path / "out.sql"

        summary = StreamingPipeline().convert_file(str(source), str(output))

        assert summary.lines_processed == 4
        assert output.read_text(encoding="utf-8").split("\n")[HEADER_LINES:] == ["", "", "  ", "SELECT LIMIT 2 a", ""]

    def test_invalid_utf8_raises_read_error(self, tmp_path):
        source = tmp_path / "bad.sql"
        source.write_bytes(b"SELECT 1;\n\xff\xfe\xfa broken\n")
        with pytest.raises(ReadError) as exc:
            StreamingPipeline().convert_file(str(source), str(tmp_path / "out.sql"))
        assert exc.value.path == str(source)

    def test_unwritable_output_raises_write_error(self, sql_file, tmp_path):
        with pytest.raises(WriteError):
            StreamingPipeline().convert_file(str(sql_file), str(tmp_path / "missing_dir" / "out.sql"))

    def test_matches_buffered_body(self, sql_file, tmp_path, sample_sql):
        output = tmp_path / "out.sql"
        StreamingPipeline().convert_file(str(sql_file), str(output))

        streamed_body = output.read_text(encoding="utf-8").split("\n")[HEADER_LINES:]
        buffered_body = BufferedPipeline().convert(sample_sql).text.split("\n")[HEADER_LINES:]
        assert streamed_body == buffered_body
