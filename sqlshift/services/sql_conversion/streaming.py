"""
Line-by-line conversion for inputs too large to hold in memory.

The source is consumed as a lazy iterator of lines. Output goes through a
``BoundedWriter``: once the pending output reaches the high-water mark,
``write()`` reports that the destination is saturated and the pipeline
drains it before pulling the next line. Memory use therefore depends on
the high-water mark and the longest line, never on the size of the input.
"""
from typing import Callable, Iterator, List, Optional, TextIO

from sqlshift.utils.logger import setup_logger
from .exceptions import EmptyInput, InputNotFound, ReadError, WriteError
from .models import StreamSummary
from .transformer import Transformer
from .utils.provenance import build_header

DEFAULT_PROGRESS_INTERVAL = 10_000
DEFAULT_HIGH_WATER_MARK = 64 * 1024

ProgressCallback = Callable[[int], None]


class BoundedWriter:
    """Write side of a conversion with an explicit acceptance signal.

    ``write`` queues *data* and returns ``False`` when the queue has reached
    ``high_water_mark`` characters; the caller must ``drain`` before writing
    more. ``peak_pending`` records the largest queue size seen.
    """

    def __init__(self, stream: TextIO, path: str = "<stream>", high_water_mark: int = DEFAULT_HIGH_WATER_MARK):
        self.stream = stream
        self.path = path
        self.high_water_mark = high_water_mark
        self._pending: List[str] = []
        self.pending_chars = 0
        self.peak_pending = 0
        self.drain_count = 0

    def write(self, data: str) -> bool:
        self._pending.append(data)
        self.pending_chars += len(data)
        self.peak_pending = max(self.peak_pending, self.pending_chars)
        return self.pending_chars < self.high_water_mark

    def drain(self) -> None:
        """Hand every pending chunk to the destination and flush it."""
        if not self._pending:
            return
        try:
            self.stream.write("".join(self._pending))
            self.stream.flush()
        except OSError as e:
            raise WriteError(self.path, e) from e
        finally:
            self._pending.clear()
            self.pending_chars = 0
        self.drain_count += 1

    def discard(self) -> None:
        self._pending.clear()
        self.pending_chars = 0


class StreamingPipeline:

    def __init__(
        self,
        transformer: Optional[Transformer] = None,
        *,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
    ):
        self.transformer = transformer or Transformer()
        self.progress_interval = progress_interval
        self.high_water_mark = high_water_mark
        self.logger = setup_logger("StreamingPipeline")
        self.last_writer: Optional[BoundedWriter] = None

    def convert_file(self, input_path: str, output_path: str,
                     progress: Optional[ProgressCallback] = None) -> StreamSummary:
        """Convert *input_path* into *output_path*; both files are closed on every exit path.

        A source holding nothing but whitespace raises EmptyInput before the
        destination is created.
        """
        try:
            source = open(input_path, "r", encoding="utf-8", newline=None)
        except FileNotFoundError as e:
            raise InputNotFound(input_path) from e
        except OSError as e:
            raise ReadError(input_path, e) from e

        with source:
            if not self._has_content(source, input_path):
                raise EmptyInput(input_path)
            source.seek(0)

            try:
                destination = open(output_path, "w", encoding="utf-8", newline="\n")
            except OSError as e:
                raise WriteError(output_path, e) from e
            with destination:
                summary = self.convert_stream(source, destination, progress,
                                              source_name=input_path, destination_name=output_path)

        summary.message = (
            f"Successfully converted {input_path} to {output_path} "
            f"({summary.lines_processed} lines processed, {summary.lines_changed} lines converted)"
        )
        return summary

    def convert_stream(self, source: TextIO, destination: TextIO,
                       progress: Optional[ProgressCallback] = None, *,
                       source_name: str = "<source>", destination_name: str = "<destination>") -> StreamSummary:
        """Run the streaming protocol over already opened text streams.

        The streams are not closed here; pending output is flushed on success
        and discarded on failure.
        """
        progress = progress or self._log_progress
        writer = BoundedWriter(destination, destination_name, self.high_water_mark)
        self.last_writer = writer

        lines_processed = 0
        lines_changed = 0
        try:
            writer.write(build_header())
            writer.drain()

            for line in self._iter_lines(source, source_name):
                lines_processed += 1
                converted, substitutions = self.transformer.apply_with_count(line)
                if substitutions:
                    lines_changed += 1

                if not writer.write(converted + "\n"):
                    writer.drain()

                if lines_processed % self.progress_interval == 0:
                    progress(lines_processed)

            writer.drain()
        except (ReadError, WriteError):
            writer.discard()
            self.logger.error(f"Streaming conversion of {source_name} aborted after {lines_processed} lines")
            raise

        self.logger.info(f"Processed {lines_processed} lines total.")
        return StreamSummary(
            success=True,
            message=f"Converted {lines_processed} lines ({lines_changed} lines converted)",
            lines_processed=lines_processed,
            lines_changed=lines_changed,
        )

    @classmethod
    def _has_content(cls, source: TextIO, source_name: str) -> bool:
        """True once a line with a non-whitespace character is found."""
        return any(line.strip() for line in cls._iter_lines(source, source_name))

    @staticmethod
    def _iter_lines(source: TextIO, source_name: str) -> Iterator[str]:
        """Yield lines without their terminator; decoding/IO failures become ReadError."""
        try:
            for raw in source:
                yield raw[:-1] if raw.endswith("\n") else raw
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(source_name, e) from e

    def _log_progress(self, lines: int) -> None:
        self.logger.info(f"Processed {lines} lines...")
