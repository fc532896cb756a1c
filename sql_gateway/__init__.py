"""SQL Server tool gateway: a fixed catalog of tools translated into T-SQL"""

from .catalog import Catalog
from .dispatcher import Dispatcher
from .errors import ErrorKind, ExecutionError, GatewayError, GenerationError, UnknownOperation, ValidationError
from .models import ExecutionResult, ResponseEnvelope, SqlStatement
from .tools_manifest import build_catalog

__all__ = [
    'Catalog',
    'Dispatcher',
    'ErrorKind',
    'ExecutionError',
    'ExecutionResult',
    'GatewayError',
    'GenerationError',
    'ResponseEnvelope',
    'SqlStatement',
    'UnknownOperation',
    'ValidationError',
    'build_catalog',
]

__version__ = '1.0.0'
