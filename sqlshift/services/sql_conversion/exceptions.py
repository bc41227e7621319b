"""Errors raised by the conversion engine.

Every error carries the path it concerns so batch runs can report it per
file. Nothing in the engine retries; callers decide what a failure means.
"""
from typing import Optional


class ConversionError(Exception):
    """Base class for conversion failures."""

    def __init__(self, path, message: str, cause: Optional[BaseException] = None):
        self.path = str(path)
        self.cause = cause
        super().__init__(message)


class InputNotFound(ConversionError):
    def __init__(self, path):
        super().__init__(path, f'Input file "{path}" not found.')


class ReadError(ConversionError):
    def __init__(self, path, cause: BaseException):
        super().__init__(path, f"Error reading file {path}: {cause}", cause)


class WriteError(ConversionError):
    def __init__(self, path, cause: BaseException):
        super().__init__(path, f"Error writing file {path}: {cause}", cause)


class EmptyInput(ConversionError):
    def __init__(self, path):
        super().__init__(path, f"Input file {path} is empty.")
