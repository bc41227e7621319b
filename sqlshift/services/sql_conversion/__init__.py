"""
SQL Conversion Package - SQL Server to MySQL rewriting engine.

Main Components:
    - ConversionOrchestrator: single-file and batch entry point
    - Transformer / DEFAULT_RULES: the ordered rewrite rule table
    - BufferedPipeline: whole-document conversion, preview and statistics
    - StreamingPipeline: bounded-memory line-by-line conversion
    - select_mode: size-based choice between the two pipelines

Usage:
    from sqlshift.services.sql_conversion import ConversionOrchestrator

    orchestrator = ConversionOrchestrator()
    report = orchestrator.run_batch("source_files/", "converted/")
"""

from .exceptions import ConversionError, EmptyInput, InputNotFound, ReadError, WriteError
from .models import BatchReport, ConversionMode, ConversionOutcome, ConversionStats, FileOutcome, StreamSummary
from .rules import DEFAULT_RULES, Rule
from .transformer import Transformer
from .mode_selector import STREAMING_THRESHOLD_BYTES, select_mode
from .buffered import BufferedPipeline
from .streaming import BoundedWriter, StreamingPipeline
from .orchestrator import ConversionOrchestrator

__all__ = [
    'ConversionOrchestrator',
    'BufferedPipeline',
    'StreamingPipeline',
    'BoundedWriter',
    'Transformer',
    'Rule',
    'DEFAULT_RULES',
    'select_mode',
    'STREAMING_THRESHOLD_BYTES',
    'ConversionMode',
    'ConversionOutcome',
    'ConversionStats',
    'StreamSummary',
    'FileOutcome',
    'BatchReport',
    'ConversionError',
    'InputNotFound',
    'ReadError',
    'WriteError',
    'EmptyInput',
]
