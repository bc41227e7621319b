"""
Common file utilities used across the application.
Consolidates file discovery, reading/writing and output path naming.
"""
import fnmatch
import os
from pathlib import Path
from typing import List, Optional

from sqlshift.services.sql_conversion.exceptions import EmptyInput, InputNotFound, ReadError, WriteError


def find_sql_files(directory: str, pattern: str = "*.sql") -> List[str]:
    """
    Find the files directly inside *directory* whose name matches *pattern*.

    Matching is a shell-style glob compared case-insensitively, so the
    default ``*.sql`` also picks up ``REPORT.SQL``. Sub-directories are not
    descended into.

    Args:
        directory: Directory to scan
        pattern: Glob applied to the bare file name

    Returns:
        Sorted list of paths to matching files
    """
    if not os.path.isdir(directory):
        raise InputNotFound(directory)

    wanted = (pattern or "*.sql").lower()
    matches = []
    for name in os.listdir(directory):
        full_path = os.path.join(directory, name)
        if os.path.isfile(full_path) and fnmatch.fnmatchcase(name.lower(), wanted):
            matches.append(full_path)
    return sorted(matches)


def default_output_path(input_file: str, output_dir: Optional[str] = None, suffix: str = "_mysql") -> str:
    """``<dir>/<stem><suffix>.sql`` next to the input, or inside *output_dir*."""
    stem = Path(input_file).stem
    target_dir = output_dir if output_dir is not None else os.path.dirname(input_file)
    return os.path.join(target_dir, f"{stem}{suffix}.sql")


def read_file_content(file_path: str) -> str:
    """
    Read a whole UTF-8 file.

    Raises:
        InputNotFound: the path does not exist
        ReadError: the file exists but cannot be read or decoded
        EmptyInput: the file is empty or whitespace-only
    """
    if not os.path.exists(file_path):
        raise InputNotFound(file_path)
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(file_path, e) from e

    if not content.strip():
        raise EmptyInput(file_path)

    return content


def write_file_content(file_path: str, content: str) -> None:
    """Write *content* as UTF-8, creating parent directories. Raises WriteError."""
    try:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)
    except OSError as e:
        raise WriteError(file_path, e) from e


def ensure_directory_exists(directory_path: str) -> None:
    """
    Ensure that a directory exists, creating it if necessary.

    Args:
        directory_path: Path to the directory to create
    """
    try:
        os.makedirs(directory_path, exist_ok=True)
    except OSError as e:
        raise WriteError(directory_path, e) from e
