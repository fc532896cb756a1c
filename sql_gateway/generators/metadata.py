# sql_gateway/generators/metadata.py
"""
Catalog-view queries: databases, schemas, tables, views, routines and table structure.
Schema and table names are always bound, never spliced.
"""

from typing import Any, Dict

from ..builders import bind_filter, join_clauses
from ..models import SqlStatement, ValidatedArguments

LIST_DATABASES = """SELECT name, database_id, create_date, collation_name,
       state_desc, recovery_model_desc, compatibility_level
FROM sys.databases
WHERE database_id > 4
ORDER BY name"""

LIST_TABLES = """SELECT t.TABLE_SCHEMA, t.TABLE_NAME, t.TABLE_TYPE
FROM INFORMATION_SCHEMA.TABLES t
WHERE t.TABLE_TYPE = 'BASE TABLE'"""

LIST_VIEWS = """SELECT TABLE_SCHEMA, TABLE_NAME, VIEW_DEFINITION
FROM INFORMATION_SCHEMA.VIEWS"""

LIST_ROUTINES = """SELECT ROUTINE_SCHEMA, ROUTINE_NAME, ROUTINE_TYPE, {extra}CREATED, LAST_ALTERED
FROM INFORMATION_SCHEMA.ROUTINES
WHERE ROUTINE_TYPE = '{routine_type}'"""

LIST_SCHEMAS = """SELECT schema_name, schema_id
FROM INFORMATION_SCHEMA.SCHEMATA
ORDER BY schema_name"""

DESCRIBE_TABLE = """SELECT
  c.COLUMN_NAME,
  c.DATA_TYPE,
  c.IS_NULLABLE,
  c.COLUMN_DEFAULT,
  c.CHARACTER_MAXIMUM_LENGTH,
  c.NUMERIC_PRECISION,
  c.NUMERIC_SCALE,
  c.ORDINAL_POSITION,
  CASE WHEN pk.COLUMN_NAME IS NOT NULL THEN 'YES' ELSE 'NO' END AS IS_PRIMARY_KEY
FROM INFORMATION_SCHEMA.COLUMNS c
LEFT JOIN (
  SELECT ku.COLUMN_NAME
  FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
  JOIN INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc ON ku.CONSTRAINT_NAME = tc.CONSTRAINT_NAME
  WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY'
  AND ku.TABLE_NAME = :table_name
  AND ku.TABLE_SCHEMA = :schema_name
) pk ON c.COLUMN_NAME = pk.COLUMN_NAME
WHERE c.TABLE_NAME = :table_name
AND c.TABLE_SCHEMA = :schema_name
ORDER BY c.ORDINAL_POSITION"""

TABLE_INDEXES = """SELECT
  i.name AS IndexName,
  i.type_desc AS IndexType,
  i.is_unique AS IsUnique,
  i.is_primary_key AS IsPrimaryKey,
  STRING_AGG(c.name, ', ') AS IndexColumns
FROM sys.indexes i
JOIN sys.index_columns ic ON i.object_id = ic.object_id AND i.index_id = ic.index_id
JOIN sys.columns c ON ic.object_id = c.object_id AND ic.column_id = c.column_id
JOIN sys.objects o ON i.object_id = o.object_id
JOIN sys.schemas s ON o.schema_id = s.schema_id
WHERE o.name = :table_name
AND s.name = :schema_name
AND i.type > 0
GROUP BY i.name, i.type_desc, i.is_unique, i.is_primary_key
ORDER BY i.name"""

TABLE_CONSTRAINTS = """SELECT
  tc.CONSTRAINT_NAME,
  tc.CONSTRAINT_TYPE,
  STRING_AGG(kcu.COLUMN_NAME, ', ') AS Columns,
  rc.UNIQUE_CONSTRAINT_NAME AS ReferencedConstraint,
  ccu.TABLE_NAME AS ReferencedTable,
  STRING_AGG(ccu.COLUMN_NAME, ', ') AS ReferencedColumns
FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
LEFT JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu
  ON tc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME
LEFT JOIN INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc
  ON tc.CONSTRAINT_NAME = rc.CONSTRAINT_NAME
LEFT JOIN INFORMATION_SCHEMA.CONSTRAINT_COLUMN_USAGE ccu
  ON rc.UNIQUE_CONSTRAINT_NAME = ccu.CONSTRAINT_NAME
WHERE tc.TABLE_NAME = :table_name
AND tc.TABLE_SCHEMA = :schema_name
GROUP BY tc.CONSTRAINT_NAME, tc.CONSTRAINT_TYPE, rc.UNIQUE_CONSTRAINT_NAME, ccu.TABLE_NAME
ORDER BY tc.CONSTRAINT_TYPE, tc.CONSTRAINT_NAME"""

FOREIGN_KEYS = """SELECT
  f.name AS ForeignKeyName,
  OBJECT_SCHEMA_NAME(f.parent_object_id) AS SchemaName,
  OBJECT_NAME(f.parent_object_id) AS TableName,
  COL_NAME(fc.parent_object_id, fc.parent_column_id) AS ColumnName,
  OBJECT_SCHEMA_NAME(f.referenced_object_id) AS ReferencedSchemaName,
  OBJECT_NAME(f.referenced_object_id) AS ReferencedTableName,
  COL_NAME(fc.referenced_object_id, fc.referenced_column_id) AS ReferencedColumnName,
  f.delete_referential_action_desc AS DeleteAction,
  f.update_referential_action_desc AS UpdateAction
FROM sys.foreign_keys AS f
INNER JOIN sys.foreign_key_columns AS fc ON f.object_id = fc.constraint_object_id
WHERE OBJECT_SCHEMA_NAME(f.parent_object_id) = :schema_name
AND OBJECT_NAME(f.parent_object_id) = :table_name
ORDER BY f.name, fc.constraint_column_id"""


def _filtered(base: str, column: str, schema_name: Any, order_by: str, has_where: bool) -> SqlStatement:
    parameters: Dict[str, Any] = {}
    condition = bind_filter(column, "schema_name", schema_name, parameters)
    if condition:
        condition = ("AND " if has_where else "WHERE ") + condition
    return SqlStatement(join_clauses([base, condition, order_by], "\n"), parameters)


def _table_scoped(text: str, args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(text, {"table_name": args["tableName"], "schema_name": args["schemaName"]})


def list_databases(args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(LIST_DATABASES)


def list_tables(args: ValidatedArguments) -> SqlStatement:
    return _filtered(LIST_TABLES, "t.TABLE_SCHEMA", args.get("schemaName"),
                     "ORDER BY t.TABLE_SCHEMA, t.TABLE_NAME", has_where=True)


def list_views(args: ValidatedArguments) -> SqlStatement:
    return _filtered(LIST_VIEWS, "TABLE_SCHEMA", args.get("schemaName"),
                     "ORDER BY TABLE_SCHEMA, TABLE_NAME", has_where=False)


def list_stored_procedures(args: ValidatedArguments) -> SqlStatement:
    base = LIST_ROUTINES.format(extra="", routine_type="PROCEDURE")
    return _filtered(base, "ROUTINE_SCHEMA", args.get("schemaName"),
                     "ORDER BY ROUTINE_SCHEMA, ROUTINE_NAME", has_where=True)


def list_functions(args: ValidatedArguments) -> SqlStatement:
    base = LIST_ROUTINES.format(extra="DATA_TYPE, ", routine_type="FUNCTION")
    return _filtered(base, "ROUTINE_SCHEMA", args.get("schemaName"),
                     "ORDER BY ROUTINE_SCHEMA, ROUTINE_NAME", has_where=True)


def list_schemas(args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(LIST_SCHEMAS)


def describe_table(args: ValidatedArguments) -> SqlStatement:
    return _table_scoped(DESCRIBE_TABLE, args)


def get_table_indexes(args: ValidatedArguments) -> SqlStatement:
    return _table_scoped(TABLE_INDEXES, args)


def get_table_constraints(args: ValidatedArguments) -> SqlStatement:
    return _table_scoped(TABLE_CONSTRAINTS, args)


def get_foreign_keys(args: ValidatedArguments) -> SqlStatement:
    return _table_scoped(FOREIGN_KEYS, args)
