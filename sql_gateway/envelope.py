"""
Response envelopes: success formatting per result mode, and the error
envelope every failure path ends in.
"""

import logging
import traceback
from typing import Any

from .errors import ErrorKind, ExecutionError, GatewayError
from .models import ExecutionResult, OperationDefinition, ResponseEnvelope, ResultMode, SqlStatement

logger = logging.getLogger(__name__)


def format_success(definition: OperationDefinition, statement: SqlStatement,
                   result: ExecutionResult) -> ResponseEnvelope:
    mode = definition.result_mode
    if mode is ResultMode.ACKNOWLEDGE:
        template = definition.acknowledgment or "{target} completed successfully."
        payload: Any = template.format(target=statement.target or definition.name)
    elif mode is ResultMode.QUERY_RESULT:
        payload = {
            "recordset": list(result.rows),
            "rowsAffected": result.rows_affected,
            "recordsets": result.result_set_count or 1,
        }
    elif mode is ResultMode.PROCEDURE_RESULT:
        payload = {
            "procedure": statement.target,
            "recordset": list(result.rows),
            "rowsAffected": result.rows_affected,
            "resultSetCount": result.result_set_count,
        }
    else:
        payload = list(result.rows)
    return ResponseEnvelope(ok=True, payload=payload)


def build_error_envelope(operation: Any, error: BaseException) -> ResponseEnvelope:
    """
    Turn any failure into an ok=False envelope.

    Local errors (validation, lookup, generation) carry just their message;
    execution and unexpected errors also carry the stack trace for operators.
    """
    if isinstance(error, GatewayError):
        kind = error.kind
        message = f"Error executing {operation}: {error.message}"
    else:
        kind = ErrorKind.INTERNAL_ERROR
        message = f"Error executing {operation}: {error}"

    if isinstance(error, ExecutionError) or not isinstance(error, GatewayError):
        trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        message = f"{message}\n\nStack trace:\n{trace}"
        logger.error(f"Tool {operation} failed: {error}")
    else:
        logger.warning(f"Tool {operation} rejected: {error}")

    return ResponseEnvelope(ok=False, payload=message, error_kind=kind.value)
