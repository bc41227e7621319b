from typing import Dict, Any, Optional
import logging

from sqlshift import config as _app_config

# Third-party client library
try:
    import pymysql  # type: ignore
    import pymysql.cursors  # type: ignore
except ImportError:  # pragma: no cover – optional dependency
    pymysql = None

logger = logging.getLogger(__name__)

__all__ = ["get_connection", "resolve_connection_params"]


def _require(fields, cfg: Dict[str, Any], db_name: str):
    missing = [f for f in fields if not cfg.get(f)]
    if missing:
        raise ValueError(f"Missing {db_name} connection fields: {', '.join(missing)}")


def resolve_connection_params(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge the ``database`` section of settings.yaml with per-call *overrides*.

    ``None`` values in *overrides* do not mask configured values.
    """
    params = dict(_app_config.get("database", {}) or {})
    for key, value in (overrides or {}).items():
        if value is not None:
            params[key] = value
    return params


def get_connection(cfg: Dict[str, Any], *, with_database: bool = True):
    """Return a live DB-API connection to the MySQL target.

    *cfg* holds host/port/user/password/database. With ``with_database=False``
    the connection is opened without selecting a schema (used to create it).
    """
    if pymysql is None:
        raise RuntimeError("PyMySQL is not installed (pip install 'sqlshift[db]')")

    _require(["host", "user"], cfg, "MySQL")
    if with_database:
        _require(["database"], cfg, "MySQL")

    conn_kwargs = {
        "host": cfg["host"],
        "port": int(cfg.get("port") or 3306),
        "user": cfg["user"],
        "password": cfg.get("password") or "",
        "connect_timeout": int(cfg.get("connect_timeout") or 60),
        "charset": "utf8mb4",
        "cursorclass": pymysql.cursors.DictCursor,
        "autocommit": True,
    }
    if with_database:
        conn_kwargs["database"] = cfg["database"]

    logger.debug("Opening MySQL connection to %s:%s", conn_kwargs["host"], conn_kwargs["port"])
    return pymysql.connect(**conn_kwargs)
