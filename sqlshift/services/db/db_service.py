from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from pathlib import Path
import os

from sqlshift.utils.logger import setup_logger
from sqlshift.utils.file_utils import read_file_content
from .connection_factory import get_connection, resolve_connection_params
from .session import DBSession

PROGRESS_EVERY = 50


@dataclass
class ExecutionResult:
    executed_count: int = 0
    error_count: int = 0
    total_statements: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if not self.error_count:
            return "success"
        return "partial" if self.executed_count else "error"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "executed_count": self.executed_count,
            "error_count": self.error_count,
            "total_statements": self.total_statements,
            "errors": self.errors[:10],
        }


def split_sql_statements(sql: str) -> List[str]:
    """Split SQL into individual statements on bare semicolons.

    Semicolons inside string literals or routine bodies are not recognised.
    """
    return [s.strip() for s in sql.split(';') if s.strip()]


def _quote_identifier(name: str) -> str:
    return "`" + name.replace("`", "``") + "`"


class DBService:
    """Runs converted SQL against a MySQL target through a caller-owned DBSession."""

    def __init__(self):
        self.logger = setup_logger('db_service')

    def test_connection(self, session: DBSession) -> bool:
        try:
            with session.cursor() as cursor:
                cursor.execute("SELECT 1 AS test")
                cursor.fetchone()
            self.logger.info("Database connection test successful")
            return True
        except Exception as e:
            self.logger.error(f"Database connection test failed: {e}")
            return False

    def create_database(self, overrides: Optional[Dict[str, Any]] = None) -> str:
        """Create the configured database if it does not exist yet; returns its name."""
        params = resolve_connection_params(overrides)
        name = params.get("database")
        if not name:
            raise ValueError("Missing MySQL connection fields: database")

        conn = get_connection(params, with_database=False)
        try:
            with conn.cursor() as cursor:
                cursor.execute(f"CREATE DATABASE IF NOT EXISTS {_quote_identifier(name)}")
        finally:
            conn.close()
        self.logger.info(f"Database '{name}' created or already exists")
        return name

    def execute_script(self, session: DBSession, sql_content: str, label: str = "<script>",
                       logger=None) -> ExecutionResult:
        """Execute every statement of *sql_content*; failures are counted, not raised."""
        log = logger or self.logger
        statements = split_sql_statements(sql_content)
        result = ExecutionResult(total_statements=len(statements))
        log.info(f"Found {len(statements)} SQL statements to execute in {label}")

        with session.cursor() as cursor:
            for stmt_idx, statement in enumerate(statements, 1):
                try:
                    cursor.execute(statement)
                    result.executed_count += 1
                    if result.executed_count % PROGRESS_EVERY == 0:
                        log.info(f"Executed {result.executed_count}/{len(statements)} statements...")
                except Exception as stmt_err:
                    result.error_count += 1
                    preview = statement[:100] + ("..." if len(statement) > 100 else "")
                    result.errors.append(f"[#{stmt_idx}] {stmt_err}")
                    log.error(f"Error executing statement #{stmt_idx} in {label}: {stmt_err}")
                    log.debug(f"Statement preview: {preview}")

        log.info(
            f"SQL execution completed for {label}: {result.executed_count} executed, {result.error_count} errors"
        )
        return result

    def execute_sql_file(self, session: DBSession, file_path: str) -> ExecutionResult:
        """Read a converted file and execute it statement by statement.

        Raises InputNotFound / ReadError / EmptyInput for unusable files.
        """
        content = read_file_content(file_path)
        label = os.path.basename(file_path)
        exec_logger = setup_logger(f"db_service.{Path(file_path).stem}", execution_name=Path(file_path).stem)
        exec_logger.info(f"SQL file size: {os.path.getsize(file_path) / 1024 / 1024:.2f} MB")
        return self.execute_script(session, content, label=label, logger=exec_logger)

    def query(self, session: DBSession, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        with session.cursor() as cursor:
            cursor.execute(sql, params)
            return list(cursor.fetchall() or [])

    def database_info(self, session: DBSession) -> Dict[str, Any]:
        schema = session.database
        current = self.query(session, "SELECT DATABASE() AS current_database")
        tables = self.query(
            session,
            "SELECT COUNT(*) AS table_count FROM information_schema.tables WHERE table_schema = %s",
            (schema,),
        )
        size = self.query(
            session,
            "SELECT ROUND(SUM(data_length + index_length) / 1024 / 1024, 2) AS size_mb "
            "FROM information_schema.tables WHERE table_schema = %s",
            (schema,),
        )
        return {
            "database": current[0]["current_database"] if current else schema,
            "table_count": tables[0]["table_count"] if tables else 0,
            "size_mb": float(size[0]["size_mb"] or 0) if size else 0.0,
        }

    def list_tables(self, session: DBSession) -> List[Dict[str, Any]]:
        return self.query(
            session,
            "SELECT table_name AS table_name, table_rows AS table_rows FROM information_schema.tables "
            "WHERE table_schema = %s ORDER BY table_name",
            (session.database,),
        )

    def count_rows(self, session: DBSession, table: str) -> int:
        rows = self.query(session, f"SELECT COUNT(*) AS count FROM {_quote_identifier(table)}")
        return int(rows[0]["count"]) if rows else 0

    def table_row_counts(self, session: DBSession) -> Dict[str, Optional[int]]:
        """Row count per table; ``None`` for a table whose count failed."""
        counts: Dict[str, Optional[int]] = {}
        for table in self.list_tables(session):
            name = table["table_name"]
            try:
                counts[name] = self.count_rows(session, name)
            except Exception as e:
                self.logger.error(f"Failed to count rows of {name}: {e}")
                counts[name] = None
        return counts

    def sample_table(self, session: DBSession, table: str, limit: int = 5) -> List[Dict[str, Any]]:
        return self.query(session, f"SELECT * FROM {_quote_identifier(table)} LIMIT {int(limit)}")

    def table_schema(self, session: DBSession, table: str) -> List[Dict[str, Any]]:
        return self.query(
            session,
            "SELECT COLUMN_NAME, DATA_TYPE, IS_NULLABLE, COLUMN_DEFAULT, COLUMN_KEY, EXTRA "
            "FROM information_schema.columns WHERE table_schema = %s AND table_name = %s "
            "ORDER BY ORDINAL_POSITION",
            (session.database, table),
        )

    @staticmethod
    def with_default_limit(sql: str, limit: int) -> str:
        """Append ``LIMIT n`` to a SELECT that has none."""
        if sql.strip().lower().startswith("select") and "limit" not in sql.lower():
            return f"{sql.rstrip().rstrip(';')} LIMIT {int(limit)}"
        return sql
