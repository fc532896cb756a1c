import asyncio
import threading
import time
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.dialects.mssql.pyodbc import MSDialect_pyodbc
from sqlalchemy.pool import StaticPool

from sql_gateway.builders import quote_identifier, where_clause
from sql_gateway.dispatcher import Dispatcher
from sql_gateway.errors import ErrorKind, ExecutionError
from sql_gateway.executor import SqlAlchemyExecutor, connection_url


@pytest.fixture
def sqlite_executor():
    # in-memory database shared by every borrowed connection
    engine = create_engine("sqlite://", poolclass=StaticPool)
    executor = SqlAlchemyExecutor(engine)
    executor.execute("CREATE TABLE orders (id INTEGER PRIMARY KEY, status TEXT)")
    yield executor
    executor.dispose()


def test_dml_reports_rows_affected(sqlite_executor):
    result = sqlite_executor.execute(
        "INSERT INTO orders (id, status) VALUES (:id, :status)", {"id": 1, "status": "Open"}
    )
    assert result.rows == []
    assert result.rows_affected == 1
    assert result.result_set_count == 0


def test_select_with_bound_parameters(sqlite_executor):
    sqlite_executor.execute("INSERT INTO orders (id, status) VALUES (:id, :status)", {"id": 1, "status": "Open"})
    sqlite_executor.execute("INSERT INTO orders (id, status) VALUES (:id, :status)", {"id": 2, "status": "Closed"})

    result = sqlite_executor.execute("SELECT id, status FROM orders WHERE status = :status", {"status": "Open"})
    assert result.rows == [{"id": 1, "status": "Open"}]
    assert result.result_set_count == 1


def test_hostile_parameter_value_is_data(sqlite_executor):
    sqlite_executor.execute(
        "INSERT INTO orders (id, status) VALUES (:id, :status)", {"id": 1, "status": "x'; DROP TABLE orders; --"}
    )
    result = sqlite_executor.execute("SELECT COUNT(*) AS n FROM orders")
    assert result.rows == [{"n": 1}]


def test_database_error_becomes_execution_error(sqlite_executor):
    with pytest.raises(ExecutionError) as exc:
        sqlite_executor.execute("SELECT * FROM missing_table")
    assert exc.value.kind is ErrorKind.EXECUTION_ERROR
    assert "missing_table" in exc.value.message


def test_failed_call_leaves_executor_usable(sqlite_executor):
    with pytest.raises(ExecutionError):
        sqlite_executor.execute("INSERT INTO orders (id, status) VALUES (:id)", {"id": 1})
    assert sqlite_executor.execute("SELECT COUNT(*) AS n FROM orders").rows == [{"n": 0}]


def test_connection_url():
    assert connection_url("sqlite://") == "sqlite://"
    url = connection_url("Driver={ODBC Driver 18 for SQL Server};Server=db;Database=Sales")
    assert url.startswith("mssql+pyodbc:///?odbc_connect=")
    assert "Driver%3D%7BODBC+Driver+18+for+SQL+Server%7D" in url


def test_compile_binds_only_generated_placeholders(generate):
    # SQL Server's pyodbc dialect with the driver's qmark paramstyle, no connection needed
    executor = SqlAlchemyExecutor(SimpleNamespace(dialect=MSDialect_pyodbc(paramstyle="qmark")))
    statement = generate("get_table_data", {
        "tableName": "Ratio :pct", "whereClause": "Note = 'see :ref'", "limit": 5,
    })
    compiled, bound = executor._compile(statement.text, statement.parameters)
    assert compiled == "SELECT TOP (?) * FROM [dbo].[Ratio :pct] WHERE Note = 'see :ref'"
    assert bound == [5]


def test_escaped_colons_reach_the_database_literally(sqlite_executor):
    table = quote_identifier("Ratio :pct")
    sqlite_executor.execute(f"CREATE TABLE {table} (id INTEGER, note TEXT)")
    sqlite_executor.execute(f"INSERT INTO {table} (id, note) VALUES (:id, :note)", {"id": 1, "note": "see :ref"})

    condition = where_clause("note = 'see :ref'")
    result = sqlite_executor.execute(f"SELECT id FROM {table} {condition} LIMIT :n", {"n": 5})
    assert result.rows == [{"id": 1}]


def test_abandoned_call_is_rolled_back(sqlite_executor):
    abandoned = threading.Event()
    abandoned.set()
    with pytest.raises(ExecutionError) as exc:
        sqlite_executor.execute(
            "INSERT INTO orders (id, status) VALUES (:id, :status)", {"id": 1, "status": "Open"}, cancelled=abandoned
        )
    assert "rolled back" in exc.value.message
    assert sqlite_executor.execute("SELECT COUNT(*) AS n FROM orders").rows == [{"n": 0}]


@pytest.mark.asyncio
async def test_timed_out_write_is_not_committed(catalog):
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    executor = SqlAlchemyExecutor(engine)
    executor.execute("CREATE TABLE orders (id INTEGER PRIMARY KEY, status TEXT)")

    def slow():
        time.sleep(0.3)
        return 1

    raw = engine.raw_connection()
    raw.driver_connection.create_function("slow", 0, slow)
    raw.close()

    dispatcher = Dispatcher(catalog, executor, query_timeout=0.05)
    envelope = await dispatcher.dispatch_async(
        "execute_query", {"query": "INSERT INTO orders (id, status) SELECT slow(), 'Open'"}
    )
    assert envelope.ok is False
    assert envelope.error_kind == "ExecutionError"

    # let the abandoned worker finish its batch
    await asyncio.sleep(1.0)
    assert executor.execute("SELECT COUNT(*) AS n FROM orders").rows == [{"n": 0}]
    executor.dispose()


def test_pyodbc_connections_get_the_query_timeout():
    raw = SimpleNamespace(driver_connection=SimpleNamespace(timeout=0))
    executor = SqlAlchemyExecutor(SimpleNamespace(dialect=SimpleNamespace(driver="pyodbc")), query_timeout=2.5)
    executor._apply_timeout(raw)
    assert raw.driver_connection.timeout == 3

    raw = SimpleNamespace(driver_connection=SimpleNamespace(timeout=0))
    SqlAlchemyExecutor(SimpleNamespace(dialect=SimpleNamespace(driver="pysqlite")), query_timeout=2.5)._apply_timeout(raw)
    assert raw.driver_connection.timeout == 0
