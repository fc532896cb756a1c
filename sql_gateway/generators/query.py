# sql_gateway/generators/query.py

from typing import Any, Dict, Mapping, Optional

from ..builders import qualified_name, routine_parameter, trusted_fragment
from ..errors import GenerationError
from ..models import SqlStatement, ValidatedArguments


def _bound_parameters(raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Caller parameters keyed by bare name, ready to bind as :name."""
    bound: Dict[str, Any] = {}
    for key, value in (raw or {}).items():
        name = routine_parameter(key)
        if name in bound:
            raise GenerationError(f"Parameter {name!r} supplied more than once")
        bound[name] = value
    return bound


def execute_query(args: ValidatedArguments) -> SqlStatement:
    parameters = _bound_parameters(args.get("parameters"))
    # without parameters every :word in the query is literal text
    query = trusted_fragment(args["query"], "raw query", literal_colons=not parameters)
    if not query.strip():
        raise GenerationError("Query text is empty")
    return SqlStatement(query, parameters)


def execute_stored_procedure(args: ValidatedArguments) -> SqlStatement:
    target = qualified_name(args["schemaName"], args["procedureName"])
    parameters = _bound_parameters(args.get("parameters"))
    assignments = ", ".join(f"@{name} = :{name}" for name in parameters)
    text = f"EXEC {target} {assignments}" if assignments else f"EXEC {target}"
    return SqlStatement(text, parameters, target=target)
