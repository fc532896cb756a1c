"""
SQL fragment builders for T-SQL.

Every identifier a caller supplies goes through quote_identifier; every caller
string that has to be spliced into statement text verbatim goes through
trusted_fragment, which is the single place such interpolation happens.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import GenerationError, MalformedIdentifier

logger = logging.getLogger(__name__)

# sysname is nvarchar(128)
MAX_IDENTIFIER_LENGTH = 128

_PARAMETER_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# the :name pattern sqlalchemy text() compiles into a bind; a leading backslash keeps it literal
_BIND_PLACEHOLDER = re.compile(r"(?<![:\w$\\]):([\w$]+)(?![:\w$])")


def escape_placeholders(sql: str) -> str:
    """Escape every :name in caller text so only generated placeholders are bound."""
    return _BIND_PLACEHOLDER.sub(lambda m: "\\" + m.group(0), sql)


def quote_identifier(name: str) -> str:
    """
    Bracket-quote a schema, table, column or routine name.

    Closing brackets inside the name are doubled so the name can never close
    the quoted identifier early. A name that already arrives wrapped in
    brackets is rejected instead of being quoted a second time.
    """
    if not isinstance(name, str) or not name.strip():
        raise MalformedIdentifier(f"Identifier must be a non-empty string, got {name!r}")
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise MalformedIdentifier(
            f"Identifier exceeds {MAX_IDENTIFIER_LENGTH} characters: {name[:32]!r}..."
        )
    if name.startswith("[") and name.endswith("]"):
        raise MalformedIdentifier(f"Identifier is already quoted: {name!r}")
    if "\x00" in name:
        raise MalformedIdentifier(f"Identifier contains a NUL character: {name!r}")
    return "[" + escape_placeholders(name.replace("]", "]]")) + "]"


def qualified_name(schema: str, name: str) -> str:
    """[schema].[name], each part quoted on its own."""
    return f"{quote_identifier(schema)}.{quote_identifier(name)}"


def quote_literal(value: str) -> str:
    """Single-quoted T-SQL string literal with embedded quotes doubled."""
    return "'" + escape_placeholders(str(value).replace("'", "''")) + "'"


def trusted_fragment(value: Optional[str], context: str, literal_colons: bool = True) -> str:
    """
    Return caller text to be spliced into a statement verbatim.

    Used for the clauses T-SQL cannot bind: free-text WHERE / ORDER BY
    conditions, data types, default expressions, view and function bodies,
    and query text for plan analysis. These fragments run with the
    permissions of the connected login.

    Colons are escaped so :word inside the fragment stays literal; pass
    literal_colons=False only for caller text whose :name placeholders are bound.
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        raise GenerationError(f"{context} must be SQL text, got {type(value).__name__}")
    logger.debug("Splicing caller SQL fragment into %s: %r", context, value)
    return escape_placeholders(value) if literal_colons else value


def where_clause(condition: Optional[str]) -> str:
    condition = trusted_fragment(condition, "WHERE clause")
    return f"WHERE {condition}" if condition.strip() else ""


def order_by_clause(expression: Optional[str]) -> str:
    expression = trusted_fragment(expression, "ORDER BY clause")
    return f"ORDER BY {expression}" if expression.strip() else ""


def top_clause(count: Optional[int], parameter: str, parameters: Dict[str, Any]) -> str:
    """TOP (:parameter), binding count into parameters; empty when count is None."""
    if count is None:
        return ""
    parameters[parameter] = count
    return f"TOP (:{parameter})"


def column_list(columns: Optional[str]) -> str:
    """Quote a comma-separated column list; ``*`` or nothing selects all columns."""
    if columns is None or columns.strip() in ("", "*"):
        return "*"
    names = [c.strip() for c in columns.split(",")]
    if any(not n for n in names):
        raise MalformedIdentifier(f"Empty column name in column list: {columns!r}")
    return ", ".join(quote_identifier(n) for n in names)


def join_clauses(parts: Iterable[str], separator: str = " ") -> str:
    """Join statement parts, leaving out the empty ones."""
    return separator.join(p for p in parts if p)


def bind_filter(column: str, parameter: str, value: Any, parameters: Dict[str, Any]) -> str:
    """``column = :parameter`` with value bound; empty when value is absent."""
    if value is None or value == "":
        return ""
    parameters[parameter] = value
    return f"{column} = :{parameter}"


def routine_parameter(name: str) -> str:
    """Bare routine parameter name (without the leading @), checked for safe characters."""
    bare = name[1:] if isinstance(name, str) and name.startswith("@") else name
    if not isinstance(bare, str) or not _PARAMETER_NAME.match(bare):
        raise GenerationError(f"Invalid parameter name: {name!r}")
    return bare


def column_definition(column: Mapping[str, Any]) -> str:
    """
    One column line of a CREATE TABLE body.

    Modifiers are appended in a fixed order: identity, nullability, default.
    """
    parts = [
        quote_identifier(column["name"]),
        trusted_fragment(column["dataType"], "column data type"),
    ]
    if column.get("identity"):
        parts.append("IDENTITY(1,1)")
    if not column.get("nullable"):
        parts.append("NOT NULL")
    default = trusted_fragment(column.get("defaultValue"), "column default")
    if default:
        parts.append(f"DEFAULT {default}")
    return " ".join(parts)


def column_definitions(table_name: str, columns: Sequence[Mapping[str, Any]]) -> List[str]:
    """Column lines in caller order, plus one trailing composite primary key."""
    if not columns:
        raise GenerationError(f"Table {table_name!r} needs at least one column")
    seen = set()
    for column in columns:
        key = column["name"].lower()
        if key in seen:
            raise GenerationError(f"Duplicate column name: {column['name']!r}")
        seen.add(key)

    lines = [column_definition(c) for c in columns]
    primary_key = [c["name"] for c in columns if c.get("isPrimaryKey")]
    if primary_key:
        lines.append(primary_key_constraint(table_name, primary_key, [c["name"] for c in columns]))
    return lines


def primary_key_constraint(table_name: str, key_columns: Sequence[str], declared: Sequence[str]) -> str:
    missing = [c for c in key_columns if c not in declared]
    if missing:
        raise GenerationError(f"Primary key references undeclared columns: {', '.join(missing)}")
    key_list = ", ".join(quote_identifier(c) for c in key_columns)
    # PK_<table>, cut to the sysname limit
    constraint = ("PK_" + table_name)[:MAX_IDENTIFIER_LENGTH]
    return f"CONSTRAINT {quote_identifier(constraint)} PRIMARY KEY ({key_list})"
