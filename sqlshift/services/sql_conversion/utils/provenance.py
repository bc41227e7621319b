from datetime import datetime, timezone
from typing import Optional

__all__ = ["build_header", "iso_timestamp"]

SOURCE_DIALECT_LABEL = "SQL Server"
TARGET_DIALECT_LABEL = "MySQL"


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """Return *now* (default: current UTC time) as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_header(now: Optional[datetime] = None) -> str:
    """Three comment lines and a blank line, prepended to every converted file."""
    return (
        f"-- Converted from {SOURCE_DIALECT_LABEL} to {TARGET_DIALECT_LABEL}\n"
        f"-- Generated on: {iso_timestamp(now)}\n"
        "-- Use with caution and verify before executing\n"
        "\n"
    )
