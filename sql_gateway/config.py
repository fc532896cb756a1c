# sql_gateway/config.py

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .tools_manifest import DEFAULT_SCHEMA


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read from the environment (and a .env file, if present)."""

    connection_string: Optional[str] = None
    default_schema: str = DEFAULT_SCHEMA
    api_key: Optional[str] = None
    query_timeout: float = 30.0
    host: str = "127.0.0.1"
    port: int = 5010
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        if environ is None:
            load_dotenv()
            environ = os.environ
        timeout = environ.get("SQL_GATEWAY_QUERY_TIMEOUT")
        return cls(
            connection_string=environ.get("SQL_CONNECTION_STRING") or None,
            default_schema=environ.get("SQL_GATEWAY_DEFAULT_SCHEMA") or DEFAULT_SCHEMA,
            api_key=environ.get("SQL_GATEWAY_API_KEY") or None,
            query_timeout=float(timeout) if timeout else cls.query_timeout,
            host=environ.get("SQL_GATEWAY_HOST", cls.host),
            port=int(environ.get("SQL_GATEWAY_PORT", cls.port)),
            log_level=environ.get("SQL_GATEWAY_LOG_LEVEL", cls.log_level).upper(),
        )
