# sql_gateway/generators/data.py

from typing import Any, Dict

from ..builders import column_list, join_clauses, order_by_clause, qualified_name, top_clause, where_clause
from ..models import SqlStatement, ValidatedArguments


def get_table_data(args: ValidatedArguments) -> SqlStatement:
    parameters: Dict[str, Any] = {}
    text = join_clauses([
        "SELECT",
        top_clause(args.get("limit"), "limit", parameters),
        column_list(args.get("columns")),
        "FROM",
        qualified_name(args["schemaName"], args["tableName"]),
        where_clause(args.get("whereClause")),
        order_by_clause(args.get("orderBy")),
    ])
    return SqlStatement(text, parameters)


def get_table_count(args: ValidatedArguments) -> SqlStatement:
    text = join_clauses([
        "SELECT COUNT(*) as RowCount FROM",
        qualified_name(args["schemaName"], args["tableName"]),
        where_clause(args.get("whereClause")),
    ])
    return SqlStatement(text)
