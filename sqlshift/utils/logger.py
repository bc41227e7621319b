import logging
import logging.handlers
import os
from datetime import datetime
from typing import Optional

from sqlshift import config

__all__ = ["setup_logger"]

_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_CONSOLE_FORMAT = "%(name)s - %(levelname)s - %(message)s"

# Server/reloader chatter stays on the console only
_FRAMEWORK_PREFIXES = ("uvicorn", "watchfiles")


def _file_filter(record: logging.LogRecord) -> bool:
    return not record.name.startswith(_FRAMEWORK_PREFIXES)


def _level(value, default: int) -> int:
    return getattr(logging, str(value).upper(), default) if value else default


def _logs_dir() -> str:
    logs_dir = config.get("base_dirs", {}).get("logs") or "logs"
    os.makedirs(logs_dir, exist_ok=True)
    return logs_dir


def _has_file_handler(handlers, path: str) -> bool:
    return any(isinstance(h, logging.FileHandler) and h.baseFilename == path for h in handlers)


# ---------------------------------------------------------------------------
# Root logger configuration (one-time) – idempotent
# ---------------------------------------------------------------------------

def _configure_root_logger() -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    log_cfg = config.get("logging", {}) or {}
    lvl_cfg = log_cfg.get("level", {}) or {}
    rotation_cfg = log_cfg.get("rotation", {}) or {}

    # FileHandler subclasses StreamHandler, so compare exact types
    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        console = logging.StreamHandler()
        console.setLevel(_level(lvl_cfg.get("console"), logging.INFO))
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        root.addHandler(console)

    app_log = os.path.abspath(os.path.join(_logs_dir(), "app.log"))
    if not _has_file_handler(root.handlers, app_log):
        rotating = logging.handlers.RotatingFileHandler(
            app_log,
            mode="a",
            maxBytes=int(rotation_cfg.get("max_bytes", 10 * 1024 * 1024)),
            backupCount=int(rotation_cfg.get("backup_count", 5)),
            encoding=rotation_cfg.get("encoding", "utf-8"),
        )
        rotating.setLevel(_level(lvl_cfg.get("file"), logging.DEBUG))
        rotating.setFormatter(logging.Formatter(_FILE_FORMAT))
        rotating.addFilter(_file_filter)
        root.addHandler(rotating)


def _attach_execution_log(logger: logging.Logger, execution_name: str) -> None:
    """Give *logger* its own ``db_execution/<name>_execution_<ts>/execution.log``."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    exec_dir = os.path.join(_logs_dir(), "db_execution", f"{execution_name}_execution_{stamp}")
    os.makedirs(exec_dir, exist_ok=True)

    exec_file = os.path.abspath(os.path.join(exec_dir, "execution.log"))
    if _has_file_handler(logger.handlers, exec_file):
        return

    handler = logging.FileHandler(exec_file, mode="w", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    logger.addHandler(handler)
    logger.info("Execution logging to: %s", exec_dir)


# ---------------------------------------------------------------------------
# Public helper
# ---------------------------------------------------------------------------

def setup_logger(name: str, *, execution_name: Optional[str] = None) -> logging.Logger:
    """Return the named logger, wired to the shared console and ``app.log`` handlers.

    With *execution_name*, records of this logger are also kept in a
    per-run execution log so a single script load can be reviewed alone.
    """
    _configure_root_logger()

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    if execution_name:
        _attach_execution_log(logger, execution_name)
    return logger
