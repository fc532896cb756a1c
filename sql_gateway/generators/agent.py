# sql_gateway/generators/agent.py
"""SQL Server Agent job metadata from msdb."""

from typing import Any, Dict

from ..builders import bind_filter, join_clauses
from ..models import SqlStatement, ValidatedArguments

LIST_JOBS = """SELECT
  job_id,
  name AS JobName,
  enabled,
  description,
  date_created,
  date_modified,
  CASE
    WHEN enabled = 1 THEN 'Enabled'
    ELSE 'Disabled'
  END AS Status
FROM msdb.dbo.sysjobs"""

JOB_HISTORY = """SELECT
  j.name AS JobName,
  jh.step_name AS StepName,
  jh.run_date,
  jh.run_time,
  jh.run_duration,
  CASE jh.run_status
    WHEN 0 THEN 'Failed'
    WHEN 1 THEN 'Succeeded'
    WHEN 2 THEN 'Retry'
    WHEN 3 THEN 'Canceled'
    WHEN 4 THEN 'In Progress'
  END AS RunStatus,
  jh.message
FROM msdb.dbo.sysjobhistory jh
INNER JOIN msdb.dbo.sysjobs j ON jh.job_id = j.job_id
WHERE jh.run_date >= CONVERT(int, CONVERT(varchar(8), DATEADD(day, -:days, GETDATE()), 112))"""

JOB_STATUS_FLAGS = {"enabled": 1, "disabled": 0}


def list_sql_agent_jobs(args: ValidatedArguments) -> SqlStatement:
    status = args.get("status")
    condition = f"WHERE enabled = {JOB_STATUS_FLAGS[status]}" if status else ""
    return SqlStatement(join_clauses([LIST_JOBS, condition, "ORDER BY name"], "\n"))


def get_job_history(args: ValidatedArguments) -> SqlStatement:
    parameters: Dict[str, Any] = {"days": args["days"]}
    condition = bind_filter("j.name", "job_name", args.get("jobName"), parameters)
    text = join_clauses([
        JOB_HISTORY,
        f"AND {condition}" if condition else "",
        "ORDER BY jh.run_date DESC, jh.run_time DESC",
    ], "\n")
    return SqlStatement(text, parameters)
