"""
Database executor: runs SQL text with named parameters against SQL Server.

The dispatcher only depends on the DatabaseExecutor protocol. SqlAlchemyExecutor
is the production implementation; connection pooling is owned by the
SQLAlchemy engine, and each call borrows one pooled connection.
"""

import logging
import math
import threading
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union
from urllib.parse import quote_plus

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from .errors import ExecutionError
from .models import ExecutionResult

logger = logging.getLogger(__name__)


class DatabaseExecutor(Protocol):
    def execute(self, sql_text: str, parameters: Optional[Mapping[str, Any]] = None,
                cancelled: Optional[threading.Event] = None) -> ExecutionResult:
        """Run one batch; roll back instead of committing once cancelled is set."""
        ...


def connection_url(connection_string: str) -> str:
    """
    SQLAlchemy URL for a connection setting.

    A value that already looks like a URL is used as-is; anything else is
    treated as a raw ODBC connection string (Driver=...;Server=...).
    """
    if "://" in connection_string:
        return connection_string
    return "mssql+pyodbc:///?odbc_connect=" + quote_plus(connection_string)


def create_executor(connection_string: str, query_timeout: Optional[float] = None,
                    **engine_options: Any) -> "SqlAlchemyExecutor":
    engine = create_engine(connection_url(connection_string), pool_pre_ping=True, **engine_options)
    return SqlAlchemyExecutor(engine, query_timeout=query_timeout)


class SqlAlchemyExecutor:
    def __init__(self, engine: Engine, query_timeout: Optional[float] = None):
        self.engine = engine
        self.query_timeout = query_timeout

    def _apply_timeout(self, raw) -> None:
        # pyodbc aborts a statement running longer than connection.timeout seconds
        if self.query_timeout and self.engine.dialect.driver == "pyodbc":
            raw.driver_connection.timeout = max(1, int(math.ceil(self.query_timeout)))

    def _compile(self, sql_text: str, parameters: Mapping[str, Any]) -> Tuple[str, Union[Sequence[Any], Dict[str, Any]]]:
        """Rewrite :name placeholders into the driver's paramstyle."""
        compiled = text(sql_text).compile(dialect=self.engine.dialect)
        params = compiled.construct_params(dict(parameters))
        if compiled.positional:
            return compiled.string, [params[name] for name in compiled.positiontup]
        return compiled.string, params

    def execute(self, sql_text: str, parameters: Optional[Mapping[str, Any]] = None,
                cancelled: Optional[threading.Event] = None) -> ExecutionResult:
        """
        Execute one batch and collect its results.

        The first result set that returns rows becomes ExecutionResult.rows;
        every row-returning set is counted, and affected-row counts of the
        other statements in the batch are summed. When cancelled is set by the
        time the batch finishes, the transaction is rolled back, not committed.
        """
        raw = self.engine.raw_connection()
        try:
            self._apply_timeout(raw)
            # every statement is compiled; caller text arrives with its colons escaped
            statement, bound = self._compile(sql_text, parameters or {})
            cursor = raw.cursor()
            try:
                if bound:
                    cursor.execute(statement, bound)
                else:
                    cursor.execute(statement)
                rows, result_sets, affected = self._collect(cursor)
            finally:
                cursor.close()
            if cancelled is not None and cancelled.is_set():
                raise ExecutionError("Query was abandoned by the caller; changes rolled back")
            raw.commit()
        except Exception as e:
            try:
                raw.rollback()
            except Exception as rollback_error:
                logger.warning(f"Rollback failed: {rollback_error}")
            if isinstance(e, ExecutionError):
                raise
            raise ExecutionError(str(e) or type(e).__name__) from e
        finally:
            raw.close()

        return ExecutionResult(rows=rows, rows_affected=affected, result_set_count=result_sets)

    @staticmethod
    def _collect(cursor) -> Tuple[List[Dict[str, Any]], int, int]:
        rows: List[Dict[str, Any]] = []
        result_sets = 0
        affected = 0
        while True:
            if cursor.description is not None:
                columns = [c[0] for c in cursor.description]
                fetched = [dict(zip(columns, r)) for r in cursor.fetchall()]
                if result_sets == 0:
                    rows = fetched
                result_sets += 1
            elif cursor.rowcount and cursor.rowcount > 0:
                affected += cursor.rowcount
            # sqlite3 cursors have no nextset; pyodbc returns False after the last set
            nextset = getattr(cursor, "nextset", None)
            if nextset is None or not nextset():
                break
        return rows, result_sets, affected

    def dispose(self) -> None:
        self.engine.dispose()
