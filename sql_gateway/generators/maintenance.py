# sql_gateway/generators/maintenance.py
"""
Backup and DBCC statements. Neither accepts bound parameters for the
database name or the backup device, so both splice escaped literals.
"""

from ..builders import quote_identifier, quote_literal, trusted_fragment
from ..errors import GenerationError
from ..models import SqlStatement, ValidatedArguments

CURRENT_DATABASE = "(current database)"

BACKUP_OPTIONS = "FORMAT, INIT, NAME = {name}, SKIP, NOREWIND, NOUNLOAD, STATS = 10"


def backup_database(args: ValidatedArguments) -> SqlStatement:
    backup_type = args["backupType"]
    path = trusted_fragment(args["backupPath"], "backup path")
    if not path.strip():
        raise GenerationError("Backup path is empty")

    verb = "BACKUP LOG" if backup_type == "LOG" else "BACKUP DATABASE"
    options = BACKUP_OPTIONS
    if backup_type == "DIFFERENTIAL":
        options = "DIFFERENTIAL, " + options

    database_name = args.get("databaseName")
    if database_name:
        database = quote_identifier(database_name)
        preamble = []
        options = options.format(name=quote_literal(f"{database_name} {backup_type} Backup"))
        target = database
    else:
        # BACKUP cannot take DB_NAME() inline, only a variable
        database = "@database_name"
        preamble = [
            "DECLARE @database_name sysname = DB_NAME();",
            f"DECLARE @backup_name nvarchar(128) = @database_name + {quote_literal(' ' + backup_type + ' Backup')};",
        ]
        options = options.format(name="@backup_name")
        target = CURRENT_DATABASE

    lines = preamble + [
        f"{verb} {database}",
        f"TO DISK = {quote_literal(path)}",
        f"WITH {options}",
    ]
    return SqlStatement("\n".join(lines), target=target)


def check_database_integrity(args: ValidatedArguments) -> SqlStatement:
    database_name = args.get("databaseName")
    # 0 selects the current database
    database = quote_literal(database_name) if database_name else "0"
    repair = args.get("repairOption")
    arguments = f"{database}, {repair}" if repair else database
    target = quote_identifier(database_name) if database_name else CURRENT_DATABASE
    return SqlStatement(f"DBCC CHECKDB ({arguments})", target=target)
