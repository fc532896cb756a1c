# sql_gateway/tools_manifest.py

# Manifest of every tool exposed by the gateway: argument schema, generator and result mode
from typing import List

from .catalog import Catalog
from .generators import agent, data, ddl, diagnostics, maintenance, metadata, query, security
from .models import FieldKind, FieldSpec, OperationDefinition, ResultMode

DEFAULT_SCHEMA = "dbo"
DEFAULT_LOOKBACK_DAYS = 7
DEFAULT_QUERY_STATS_TOP_N = 10

BACKUP_TYPES = ("FULL", "DIFFERENTIAL", "LOG")
REPAIR_OPTIONS = ("REPAIR_ALLOW_DATA_LOSS", "REPAIR_FAST", "REPAIR_REBUILD")
JOB_STATUSES = ("enabled", "disabled")


def _string(name, description, required=False, **kwargs) -> FieldSpec:
    return FieldSpec(name, FieldKind.STRING, description, required=required, **kwargs)


def _flag(name, description) -> FieldSpec:
    return FieldSpec(name, FieldKind.BOOLEAN, description, default=False)


def _count(name, description, default=None) -> FieldSpec:
    return FieldSpec(name, FieldKind.INTEGER, description, default=default, minimum=1)


COLUMN_FIELDS = (
    _string("name", "Column name", required=True),
    _string("dataType", "SQL Server data type", required=True),
    _flag("nullable", "Whether the column is nullable"),
    _flag("isPrimaryKey", "Whether this column is part of primary key"),
    _string("defaultValue", "Default value for the column"),
    _flag("identity", "Whether this is an identity column"),
)

FUNCTION_PARAMETER_FIELDS = (
    _string("name", "Parameter name", required=True),
    _string("dataType", "Parameter data type", required=True),
)


def build_definitions(default_schema: str = DEFAULT_SCHEMA) -> List[OperationDefinition]:
    schema = _string("schemaName", f"Schema name (optional, defaults to {default_schema})",
                     default=default_schema)
    schema_filter = _string("schemaName", "Filter by schema name (optional)")
    table = _string("tableName", "Name of the table", required=True)
    where = _string("whereClause", "WHERE clause without WHERE keyword (optional)")

    def rows(name, description, category, fields, generator) -> OperationDefinition:
        return OperationDefinition(name, description, category, tuple(fields), generator, ResultMode.ROWS)

    def ack(name, description, category, fields, generator, message) -> OperationDefinition:
        return OperationDefinition(name, description, category, tuple(fields), generator,
                                   ResultMode.ACKNOWLEDGE, acknowledgment=message)

    return [
        # DDL
        ack("create_table", "Create a new table in the database", "ddl", [
            _string("tableName", "Name of the table to create", required=True),
            schema,
            FieldSpec("columns", FieldKind.ARRAY, "Array of column definitions",
                      required=True, items=COLUMN_FIELDS),
        ], ddl.create_table, "Table {target} created successfully."),
        ack("drop_table", "Drop an existing table from the database", "ddl", [
            _string("tableName", "Name of the table to drop", required=True),
            schema,
            _flag("ifExists", "Add IF EXISTS clause"),
        ], ddl.drop_table, "Table {target} dropped successfully."),
        ack("create_view", "Create a new view in the database", "ddl", [
            _string("viewName", "Name of the view to create", required=True),
            schema,
            _string("query", "SELECT query that defines the view", required=True),
            _flag("replaceIfExists", "Whether to replace the view if it exists"),
        ], ddl.create_view, "View {target} created successfully."),
        ack("create_function", "Create a new function in the database", "ddl", [
            _string("functionName", "Name of the function to create", required=True),
            schema,
            FieldSpec("parameters", FieldKind.ARRAY, "Array of function parameters",
                      items=FUNCTION_PARAMETER_FIELDS),
            _string("returnType", "Return data type of the function", required=True),
            _string("functionBody", "Body of the function", required=True),
            _flag("replaceIfExists", "Whether to replace the function if it exists"),
        ], ddl.create_function, "Function {target} created successfully."),

        # Query
        OperationDefinition(
            "execute_query", "Execute any SQL query (SELECT, INSERT, UPDATE, DELETE, etc.)", "query", (
                _string("query", "SQL query to execute; reference parameters as :name", required=True),
                FieldSpec("parameters", FieldKind.OBJECT, "Optional parameters for parameterized queries"),
            ), query.execute_query, ResultMode.QUERY_RESULT),
        OperationDefinition(
            "execute_stored_procedure", "Execute a stored procedure", "query", (
                _string("procedureName", "Name of the stored procedure", required=True),
                schema,
                FieldSpec("parameters", FieldKind.OBJECT, "Parameters for the stored procedure"),
            ), query.execute_stored_procedure, ResultMode.PROCEDURE_RESULT),

        # Metadata
        rows("list_databases", "List all databases on the SQL Server instance", "metadata",
             [], metadata.list_databases),
        rows("list_tables", "List all tables in the current database", "metadata",
             [schema_filter], metadata.list_tables),
        rows("list_views", "List all views in the current database", "metadata",
             [schema_filter], metadata.list_views),
        rows("list_stored_procedures", "List all stored procedures in the current database", "metadata",
             [schema_filter], metadata.list_stored_procedures),
        rows("list_functions", "List all user-defined functions in the current database", "metadata",
             [schema_filter], metadata.list_functions),
        rows("list_schemas", "List all schemas in the current database", "metadata",
             [], metadata.list_schemas),
        rows("describe_table", "Get detailed information about a table structure", "metadata",
             [table, schema], metadata.describe_table),
        rows("get_table_indexes", "Get all indexes for a specific table", "metadata",
             [table, schema], metadata.get_table_indexes),
        rows("get_table_constraints", "Get all constraints (PK, FK, CHECK, etc.) for a specific table", "metadata",
             [table, schema], metadata.get_table_constraints),
        rows("get_foreign_keys", "Get foreign key relationships for a table", "metadata",
             [table, schema], metadata.get_foreign_keys),

        # Data
        rows("get_table_data", "Get data from a table with optional filtering and pagination", "data", [
            table,
            schema,
            _string("columns", "Comma-separated column names (optional, * for all)"),
            where,
            _string("orderBy", "ORDER BY clause without ORDER BY keywords (optional)"),
            _count("limit", "Number of rows to return (optional)"),
        ], data.get_table_data),
        rows("get_table_count", "Get row count for a table with optional WHERE clause", "data",
             [table, schema, where], data.get_table_count),

        # Diagnostics
        rows("get_database_info", "Get general information about the current database", "diagnostics",
             [], diagnostics.get_database_info),
        rows("get_table_sizes", "Get size information for all tables in the database", "diagnostics",
             [_count("topN", "Return top N largest tables (optional)")], diagnostics.get_table_sizes),
        rows("get_active_connections", "Get information about active database connections", "diagnostics",
             [], diagnostics.get_active_connections),
        rows("get_database_files", "Get information about database files (.mdf, .ldf)", "diagnostics",
             [], diagnostics.get_database_files),
        rows("analyze_query_plan", "Get the execution plan for a query", "diagnostics",
             [_string("query", "SQL query to analyze", required=True)], diagnostics.analyze_query_plan),
        rows("get_query_statistics", "Get statistics for recently executed queries", "diagnostics", [
            _count("topN", f"Return top N queries by duration (optional, default {DEFAULT_QUERY_STATS_TOP_N})",
                   default=DEFAULT_QUERY_STATS_TOP_N),
        ], diagnostics.get_query_statistics),

        # Maintenance
        ack("backup_database", "Create a database backup", "maintenance", [
            _string("backupPath", "Full path for the backup file", required=True),
            _string("databaseName", "Database name (optional, uses current)"),
            _string("backupType", "Backup type: FULL, DIFFERENTIAL, or LOG",
                    allowed_values=BACKUP_TYPES, default="FULL"),
        ], maintenance.backup_database, "Database {target} backed up successfully."),
        ack("check_database_integrity", "Run DBCC CHECKDB to verify database integrity", "maintenance", [
            _string("databaseName", "Database name (optional, uses current)"),
            _string("repairOption", "Repair option if issues found", allowed_values=REPAIR_OPTIONS),
        ], maintenance.check_database_integrity, "Integrity check of {target} completed successfully."),

        # Security
        rows("list_users", "List all database users", "security", [], security.list_users),
        rows("list_roles", "List all database roles", "security", [], security.list_roles),
        rows("get_user_permissions", "Get permissions for a specific user", "security",
             [_string("userName", "Database user name", required=True)], security.get_user_permissions),

        # SQL Server Agent
        rows("list_sql_agent_jobs", "List SQL Server Agent jobs", "scheduling", [
            _string("status", "Filter by job status (optional)", allowed_values=JOB_STATUSES),
        ], agent.list_sql_agent_jobs),
        rows("get_job_history", "Get execution history for SQL Agent jobs", "scheduling", [
            _string("jobName", "Specific job name (optional)"),
            _count("days", f"Number of days to look back (optional, default {DEFAULT_LOOKBACK_DAYS})",
                   default=DEFAULT_LOOKBACK_DAYS),
        ], agent.get_job_history),
    ]


def build_catalog(default_schema: str = DEFAULT_SCHEMA) -> Catalog:
    return Catalog(build_definitions(default_schema))
