"""
Dispatcher: Lookup -> Validate -> Generate -> Execute -> Format, once per call.
Holds no per-call state, so one instance serves concurrent calls.
"""

import asyncio
import logging
import threading
from typing import Any, Mapping, Optional, Tuple

from .catalog import Catalog
from .envelope import build_error_envelope, format_success
from .errors import ExecutionError, GatewayError
from .executor import DatabaseExecutor
from .models import ExecutionResult, OperationDefinition, ResponseEnvelope, SqlStatement
from .validator import validate

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(self, catalog: Catalog, executor: DatabaseExecutor, query_timeout: Optional[float] = None):
        """
        Args:
            catalog: Operation catalog, built once at startup
            executor: Database executor borrowed for each call
            query_timeout: Seconds allowed for an executor call in dispatch_async (None waits forever)
        """
        self.catalog = catalog
        self.executor = executor
        self.query_timeout = query_timeout

    def prepare(self, operation: Any, arguments: Optional[Mapping[str, Any]]) -> Tuple[OperationDefinition, SqlStatement]:
        """Run the local stages; raises GatewayError before any database round trip."""
        definition = self.catalog.lookup(operation)
        validated = validate(definition, arguments)
        statement = definition.generator(validated)
        logger.debug(f"Generated SQL for {operation}: {statement.text} params={statement.parameters}")
        return definition, statement

    def execute(self, statement: SqlStatement, cancelled: Optional[threading.Event] = None) -> ExecutionResult:
        try:
            return self.executor.execute(statement.text, statement.parameters, cancelled=cancelled)
        except GatewayError:
            raise
        except Exception as e:
            raise ExecutionError(str(e) or type(e).__name__) from e

    def dispatch(self, operation: Any, arguments: Optional[Mapping[str, Any]] = None) -> ResponseEnvelope:
        try:
            definition, statement = self.prepare(operation, arguments)
            result = self.execute(statement)
            return format_success(definition, statement, result)
        except Exception as e:
            return build_error_envelope(operation, e)

    async def dispatch_async(self, operation: Any, arguments: Optional[Mapping[str, Any]] = None) -> ResponseEnvelope:
        """Like dispatch, with the executor call on a worker thread bounded by query_timeout."""
        try:
            definition, statement = self.prepare(operation, arguments)
            # set once this call gives up; the executor then rolls back instead of committing
            cancelled = threading.Event()
            try:
                result = await asyncio.wait_for(
                    asyncio.to_thread(self.execute, statement, cancelled),
                    timeout=self.query_timeout,
                )
            except asyncio.TimeoutError as e:
                cancelled.set()
                raise ExecutionError(f"Query exceeded {self.query_timeout}s") from e
            except asyncio.CancelledError as e:
                cancelled.set()
                raise ExecutionError("Query was cancelled") from e
            return format_success(definition, statement, result)
        except Exception as e:
            return build_error_envelope(operation, e)
