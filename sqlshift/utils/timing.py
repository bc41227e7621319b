from time import perf_counter
from typing import Any, Callable, Dict, Optional

from sqlshift.utils.logger import setup_logger

logger = setup_logger("timing")


def timed(func: Callable[..., Any], *args: Any, label: Optional[str] = None, **kwargs: Any) -> Any:
    """Call *func*; a dict result gets the elapsed seconds as ``duration_s``."""
    started = perf_counter()
    result = func(*args, **kwargs)
    elapsed = round(perf_counter() - started, 2)

    if isinstance(result, dict):
        result["duration_s"] = elapsed
    logger.debug(f"{label or getattr(func, '__name__', 'call')} took {elapsed}s")
    return result
