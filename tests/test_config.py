from sql_gateway.config import Settings


def test_defaults():
    settings = Settings.from_env({})
    assert settings.connection_string is None
    assert settings.default_schema == "dbo"
    assert settings.api_key is None
    assert settings.query_timeout == 30.0
    assert (settings.host, settings.port) == ("127.0.0.1", 5010)
    assert settings.log_level == "INFO"


def test_values_from_environment():
    settings = Settings.from_env({
        "SQL_CONNECTION_STRING": "Driver={ODBC Driver 18 for SQL Server};Server=db",
        "SQL_GATEWAY_DEFAULT_SCHEMA": "sales",
        "SQL_GATEWAY_API_KEY": "k",
        "SQL_GATEWAY_QUERY_TIMEOUT": "2.5",
        "SQL_GATEWAY_PORT": "8080",
        "SQL_GATEWAY_LOG_LEVEL": "debug",
    })
    assert settings.connection_string.startswith("Driver=")
    assert settings.default_schema == "sales"
    assert settings.api_key == "k"
    assert settings.query_timeout == 2.5
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"


def test_blank_values_fall_back():
    settings = Settings.from_env({"SQL_GATEWAY_API_KEY": "", "SQL_GATEWAY_DEFAULT_SCHEMA": ""})
    assert settings.api_key is None
    assert settings.default_schema == "dbo"
