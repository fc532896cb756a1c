# sql_gateway/generators/diagnostics.py

from typing import Any, Dict

from ..builders import join_clauses, top_clause, trusted_fragment
from ..errors import GenerationError
from ..models import SqlStatement, ValidatedArguments

DATABASE_INFO = """SELECT
  DB_NAME() AS DatabaseName,
  SUSER_SNAME() AS CurrentUser,
  @@VERSION AS SQLServerVersion,
  @@SERVERNAME AS ServerName,
  GETDATE() AS CurrentDateTime,
  (SELECT recovery_model_desc FROM sys.databases WHERE name = DB_NAME()) AS RecoveryModel,
  (SELECT collation_name FROM sys.databases WHERE name = DB_NAME()) AS Collation,
  (SELECT compatibility_level FROM sys.databases WHERE name = DB_NAME()) AS CompatibilityLevel"""

TABLE_SIZES = """
  t.NAME AS TableName,
  s.Name AS SchemaName,
  p.rows AS RowCounts,
  SUM(a.total_pages) * 8 AS TotalSpaceKB,
  SUM(a.used_pages) * 8 AS UsedSpaceKB,
  (SUM(a.total_pages) - SUM(a.used_pages)) * 8 AS UnusedSpaceKB
FROM sys.tables t
INNER JOIN sys.indexes i ON t.OBJECT_ID = i.object_id
INNER JOIN sys.partitions p ON i.object_id = p.OBJECT_ID AND i.index_id = p.index_id
INNER JOIN sys.allocation_units a ON p.partition_id = a.container_id
LEFT OUTER JOIN sys.schemas s ON t.schema_id = s.schema_id
WHERE t.NAME NOT LIKE 'dt%'
AND t.is_ms_shipped = 0
AND i.OBJECT_ID > 255
GROUP BY t.Name, s.Name, p.Rows
ORDER BY SUM(a.total_pages) DESC"""

ACTIVE_CONNECTIONS = """SELECT
  session_id,
  login_name,
  host_name,
  program_name,
  status,
  cpu_time,
  memory_usage,
  total_scheduled_time,
  last_request_start_time,
  last_request_end_time,
  reads,
  writes,
  logical_reads
FROM sys.dm_exec_sessions
WHERE is_user_process = 1
ORDER BY last_request_start_time DESC"""

DATABASE_FILES = """SELECT
  name AS FileName,
  physical_name AS PhysicalPath,
  type_desc AS FileType,
  size * 8 / 1024 AS SizeMB,
  max_size * 8 / 1024 AS MaxSizeMB,
  is_percent_growth,
  growth AS GrowthSetting,
  state_desc AS FileState
FROM sys.database_files
ORDER BY file_id"""

QUERY_STATISTICS = """
  qs.execution_count,
  qs.total_elapsed_time / 1000000.0 AS total_elapsed_time_sec,
  qs.total_worker_time / 1000000.0 AS total_cpu_time_sec,
  qs.total_logical_reads,
  qs.total_logical_writes,
  qs.creation_time,
  qs.last_execution_time,
  SUBSTRING(qt.text, (qs.statement_start_offset/2)+1,
    ((CASE qs.statement_end_offset
      WHEN -1 THEN DATALENGTH(qt.text)
      ELSE qs.statement_end_offset
      END - qs.statement_start_offset)/2)+1) AS statement_text
FROM sys.dm_exec_query_stats qs
CROSS APPLY sys.dm_exec_sql_text(qs.sql_handle) qt
ORDER BY qs.total_elapsed_time DESC"""


def _top_select(body: str, count, parameters: Dict[str, Any]) -> str:
    return join_clauses(["SELECT", top_clause(count, "top_n", parameters)]) + body


def get_database_info(args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(DATABASE_INFO)


def get_table_sizes(args: ValidatedArguments) -> SqlStatement:
    parameters: Dict[str, Any] = {}
    return SqlStatement(_top_select(TABLE_SIZES, args.get("topN"), parameters), parameters)


def get_active_connections(args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(ACTIVE_CONNECTIONS)


def get_database_files(args: ValidatedArguments) -> SqlStatement:
    return SqlStatement(DATABASE_FILES)


def analyze_query_plan(args: ValidatedArguments) -> SqlStatement:
    # SHOWPLAN has no bindable form; the query is spliced as-is.
    query = trusted_fragment(args["query"], "query plan analysis")
    if not query.strip():
        raise GenerationError("Query text is empty")
    return SqlStatement(f"SET SHOWPLAN_ALL ON;\n{query};\nSET SHOWPLAN_ALL OFF;")


def get_query_statistics(args: ValidatedArguments) -> SqlStatement:
    parameters: Dict[str, Any] = {}
    return SqlStatement(_top_select(QUERY_STATISTICS, args["topN"], parameters), parameters)
