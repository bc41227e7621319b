"""ConversionOrchestrator – high-level driver for SQL Server -> MySQL conversion.

Responsibilities
----------------
1. Resolve the output path of each input file (``<stem>_mysql.sql``).
2. Pick the conversion mode from the file size (buffered vs. streaming).
3. Drive the matching pipeline; optionally collect statistics or a preview.
4. For batch runs: discover matching files, convert them one after another,
   record each outcome and keep going when a file fails.
5. Produce ``conversion_summary.json`` next to the batch output.

All rewrite logic lives in the rule table and the pipelines; the
orchestrator only handles I/O decisions, logging and aggregation.

FUNCTIONS:
==========
Public Functions (called by external code):
  - convert_file(): single-file conversion (convert / stats / preview).
  - run_batch(): directory conversion, returns a BatchReport.

Private Functions (internal helpers, start with _):
  - _convert_buffered / _convert_streaming: per-mode drivers.
  - _log_file_result, _create_conversion_summary, _write_conversion_summary_to_file.
"""

import json
import os
from typing import Optional

from sqlshift import config
from sqlshift.utils import file_utils
from sqlshift.utils.logger import setup_logger
from .buffered import BufferedPipeline
from .exceptions import ConversionError, EmptyInput, InputNotFound
from .mode_selector import select_mode
from .models import BatchReport, ConversionMode, FileOutcome
from .streaming import ProgressCallback, StreamingPipeline
from .transformer import Transformer


class ConversionOrchestrator:

    def __init__(self, transformer: Optional[Transformer] = None, *,
                 streaming_threshold: Optional[int] = None,
                 write_summary: Optional[bool] = None):
        self.logger = setup_logger("ConversionOrchestrator")
        conv_cfg = config.get("conversion", {}) or {}

        self.transformer = transformer or Transformer()
        if streaming_threshold is None:
            streaming_threshold = int(float(conv_cfg.get("streaming_threshold_mb", 50)) * 1024 * 1024)
        self.streaming_threshold = streaming_threshold
        self.output_suffix = conv_cfg.get("output_suffix", "_mysql")
        self.default_pattern = conv_cfg.get("default_pattern", "*.sql")
        self.write_summary = conv_cfg.get("write_batch_summary", True) if write_summary is None else write_summary

        self.buffered = BufferedPipeline(self.transformer, preview_lines=int(conv_cfg.get("preview_lines", 20)))
        self.streaming = StreamingPipeline(
            self.transformer,
            progress_interval=int(conv_cfg.get("progress_interval", 10_000)),
            high_water_mark=int(conv_cfg.get("high_water_mark", 64 * 1024)),
        )

    # ========================================
    # SINGLE FILE
    # ========================================

    def convert_file(self, input_path: str, output_path: Optional[str] = None, *,
                     stats: bool = False, preview: bool = False,
                     progress: Optional[ProgressCallback] = None) -> FileOutcome:
        """
        Convert one SQL Server file.

        Args:
            input_path: Source file
            output_path: Destination (default: ``<dir>/<stem>_mysql.sql``)
            stats: Collect per-rule statistics (buffered mode only)
            preview: Return the first converted lines instead of writing
            progress: Observer called with the running line count in streaming mode

        Raises:
            InputNotFound, ReadError, WriteError, EmptyInput
        """
        if not os.path.isfile(input_path):
            raise InputNotFound(input_path)

        output_path = output_path or file_utils.default_output_path(input_path, suffix=self.output_suffix)
        size = os.path.getsize(input_path)
        if size == 0:
            raise EmptyInput(input_path)

        mode = select_mode(size, self.streaming_threshold)
        self.logger.info(f"Converting {input_path} ({size / (1024 * 1024):.2f}MB, {mode.value} mode)")

        if mode is ConversionMode.STREAMING:
            return self._convert_streaming(input_path, output_path, preview, progress)
        return self._convert_buffered(input_path, output_path, stats, preview)

    def _convert_buffered(self, input_path: str, output_path: str, stats: bool, preview: bool) -> FileOutcome:
        original = self.buffered.read(input_path)

        if preview:
            lines, truncated = self.buffered.preview(original)
            return FileOutcome(
                source=input_path, destination=None, mode=ConversionMode.BUFFERED, success=True,
                message=f"Preview of {input_path} (nothing written)",
                preview=lines, preview_truncated=truncated,
            )

        outcome = self.buffered.convert(original)
        self.buffered.write(outcome, output_path)
        return FileOutcome(
            source=input_path, destination=output_path, mode=ConversionMode.BUFFERED, success=True,
            message=f"Successfully converted {input_path} to {output_path}",
            stats=self.buffered.stats(original, outcome.text) if stats else None,
        )

    def _convert_streaming(self, input_path: str, output_path: str, preview: bool,
                           progress: Optional[ProgressCallback]) -> FileOutcome:
        if preview:
            self.logger.warning(f"Preview requested for large file {input_path}; not available in streaming mode")
            return FileOutcome(
                source=input_path, destination=None, mode=ConversionMode.STREAMING, success=False,
                message="Preview mode not available for large files. Use streaming conversion instead.",
            )

        summary = self.streaming.convert_file(input_path, output_path, progress)
        return FileOutcome(
            source=input_path, destination=output_path, mode=ConversionMode.STREAMING, success=True,
            message=summary.message, summary=summary,
        )

    # ========================================
    # BATCH
    # ========================================

    def run_batch(self, directory: str, output_directory: Optional[str] = None,
                  pattern: Optional[str] = None) -> BatchReport:
        """
        Convert every file in *directory* whose name matches *pattern*.

        Files are processed sequentially in name order. A failing file is
        recorded in the report and the run continues with the next one.

        Raises:
            InputNotFound: *directory* does not exist
            WriteError: *output_directory* cannot be created
        """
        pattern = pattern or self.default_pattern
        files = file_utils.find_sql_files(directory, pattern)
        output_directory = output_directory or directory
        file_utils.ensure_directory_exists(output_directory)

        report = BatchReport()
        if not files:
            self.logger.warning(f"No SQL files matching {pattern!r} found in: {directory}")
            return report

        self.logger.info(f"Found {len(files)} SQL files to convert in {directory}")
        self.logger.info(f"Output directory: {output_directory}")

        for i, input_file in enumerate(files, 1):
            self.logger.info(f"[{i}/{len(files)}] Processing: {os.path.basename(input_file)}")
            output_file = file_utils.default_output_path(input_file, output_directory, self.output_suffix)
            try:
                outcome = self.convert_file(input_file, output_file)
            except ConversionError as e:
                outcome = FileOutcome(
                    source=input_file, destination=None, mode=None, success=False, message=str(e),
                )
            report.record(outcome)
            self._log_file_result(outcome)

        self._create_conversion_summary(report, output_directory)
        return report

    # ========================================
    # HELPER METHODS
    # ========================================

    def _log_file_result(self, outcome: FileOutcome):
        """Logs the outcome of a single file's conversion."""
        filename = os.path.basename(outcome.source)
        if outcome.success:
            self.logger.info(f"Successfully processed: {filename}")
        else:
            self.logger.error(f"Failed to process: {filename} - {outcome.message}")

    def _create_conversion_summary(self, report: BatchReport, output_dir: str) -> dict:
        """Log the batch totals and persist them as ``conversion_summary.json``."""
        self.logger.info("=" * 50)
        self.logger.info("SQL CONVERSION SUMMARY")
        self.logger.info("=" * 50)
        self.logger.info(f"Total files processed: {len(report.outcomes)}")
        self.logger.info(f"  - Successful: {report.success_count}")
        self.logger.info(f"  - Failed: {report.failure_count}")

        summary = {
            "overall_statistics": {
                "total": len(report.outcomes),
                "files_successful": report.success_count,
                "files_failed": report.failure_count,
            },
            "files": [o.to_dict() for o in report.outcomes.values()],
            "output_directory": output_dir,
        }
        if self.write_summary:
            self._write_conversion_summary_to_file(summary, output_dir)
        return summary

    def _write_conversion_summary_to_file(self, summary_data_dict: dict, output_dir: str):
        """
        Writes the conversion summary to a JSON file in the output directory.
        A failure here is logged; the conversions themselves already succeeded or failed.
        """
        summary_file_path = os.path.join(output_dir, 'conversion_summary.json')
        try:
            with open(summary_file_path, 'w', encoding='utf-8') as f:
                json.dump(summary_data_dict, f, indent=4, default=str)
            self.logger.info(f"Conversion summary written to: {summary_file_path}")
        except OSError as e:
            self.logger.error(f"Failed to write conversion summary: {e}", exc_info=True)
