# sql_gateway/generators/ddl.py

from ..builders import column_definitions, qualified_name, routine_parameter, trusted_fragment
from ..errors import GenerationError
from ..models import SqlStatement, ValidatedArguments


def create_table(args: ValidatedArguments) -> SqlStatement:
    target = qualified_name(args["schemaName"], args["tableName"])
    lines = column_definitions(args["tableName"], args["columns"])
    body = ",\n".join(f"  {line}" for line in lines)
    return SqlStatement(f"CREATE TABLE {target} (\n{body}\n)", target=target)


def drop_table(args: ValidatedArguments) -> SqlStatement:
    target = qualified_name(args["schemaName"], args["tableName"])
    verb = "DROP TABLE IF EXISTS" if args.get("ifExists") else "DROP TABLE"
    return SqlStatement(f"{verb} {target}", target=target)


def create_view(args: ValidatedArguments) -> SqlStatement:
    target = qualified_name(args["schemaName"], args["viewName"])
    query = trusted_fragment(args["query"], "view definition")
    if not query.strip():
        raise GenerationError(f"View {target} needs a defining query")
    verb = "CREATE OR ALTER VIEW" if args.get("replaceIfExists") else "CREATE VIEW"
    return SqlStatement(f"{verb} {target} AS\n{query}", target=target)


def create_function(args: ValidatedArguments) -> SqlStatement:
    target = qualified_name(args["schemaName"], args["functionName"])
    verb = "CREATE OR ALTER FUNCTION" if args.get("replaceIfExists") else "CREATE FUNCTION"

    params = []
    seen = set()
    for p in args.get("parameters") or []:
        name = routine_parameter(p["name"])
        if name.lower() in seen:
            raise GenerationError(f"Duplicate function parameter: {p['name']!r}")
        seen.add(name.lower())
        params.append(f"@{name} {trusted_fragment(p['dataType'], 'parameter data type')}")

    return_type = trusted_fragment(args["returnType"], "function return type")
    body = trusted_fragment(args["functionBody"], "function body")
    text = (
        f"{verb} {target} ({', '.join(params)})\n"
        f"RETURNS {return_type}\n"
        f"AS\n"
        f"BEGIN\n"
        f"{body}\n"
        f"END"
    )
    return SqlStatement(text, target=target)
