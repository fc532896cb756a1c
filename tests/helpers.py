from sql_gateway.models import ExecutionResult


class RecordingExecutor:
    """Stands in for SQL Server: records every call and returns a canned result"""

    def __init__(self, result=None, error=None):
        self.result = result or ExecutionResult(rows=[{"ok": 1}], rows_affected=0, result_set_count=1)
        self.error = error
        self.calls = []
        self.cancelled = None

    def execute(self, sql_text, parameters=None, cancelled=None):
        self.cancelled = cancelled
        self.calls.append((sql_text, dict(parameters or {})))
        if self.error is not None:
            raise self.error
        return self.result

    @property
    def last_sql(self):
        return self.calls[-1][0]

    @property
    def last_parameters(self):
        return self.calls[-1][1]


def normalize(sql):
    """Collapse whitespace so multi-line statements compare on one line"""
    return " ".join(sql.split())
