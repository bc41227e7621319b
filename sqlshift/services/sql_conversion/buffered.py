"""Whole-document conversion for inputs that comfortably fit in memory."""
from typing import List, Optional, Tuple

from sqlshift.utils import file_utils
from sqlshift.utils.logger import setup_logger
from .models import ConversionOutcome, ConversionStats
from .transformer import Transformer
from .utils.provenance import build_header

DEFAULT_PREVIEW_LINES = 20


class BufferedPipeline:

    def __init__(self, transformer: Optional[Transformer] = None, preview_lines: int = DEFAULT_PREVIEW_LINES):
        self.transformer = transformer or Transformer()
        self.preview_lines = preview_lines
        self.logger = setup_logger("BufferedPipeline")

    def convert(self, full_text: str) -> ConversionOutcome:
        """Run every rule once over the whole text and attach the provenance header."""
        return ConversionOutcome(header=build_header(), body=self.transformer.apply(full_text))

    def preview(self, full_text: str) -> Tuple[List[str], bool]:
        """First lines of the converted document (header included) and whether more follow.

        Writes nothing.
        """
        lines = self.convert(full_text).text.split("\n")
        return lines[: self.preview_lines], len(lines) > self.preview_lines

    def stats(self, original_text: str, converted_text: str) -> ConversionStats:
        """Line counts of both texts; per-rule match counts taken from the original only."""
        return ConversionStats(
            original_line_count=len(original_text.split("\n")),
            converted_line_count=len(converted_text.split("\n")),
            per_rule=self.transformer.count_matches(original_text),
        )

    def read(self, input_path: str) -> str:
        return file_utils.read_file_content(input_path)

    def write(self, outcome: ConversionOutcome, output_path: str) -> None:
        file_utils.write_file_content(output_path, outcome.text)
        self.logger.info(f"Successfully converted to {output_path}")

    def convert_file(self, input_path: str, output_path: str) -> ConversionOutcome:
        outcome = self.convert(self.read(input_path))
        self.write(outcome, output_path)
        return outcome
