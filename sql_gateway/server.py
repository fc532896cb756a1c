# sql_gateway/server.py

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .config import Settings
from .dispatcher import Dispatcher
from .executor import create_executor
from .tools_manifest import build_catalog

logger = logging.getLogger(__name__)

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

router = APIRouter()


def _require_api_key(request: Request):
    api_key = request.app.state.settings.api_key
    if not api_key:
        return  # no auth configured
    header = request.headers.get('x-api-key')
    if not header or header != api_key:
        raise HTTPException(status_code=401, detail='Invalid API Key')


def _rpc_result(rpc_id: Any, result: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(content={"jsonrpc": "2.0", "id": rpc_id, "result": result})


def _rpc_error(rpc_id: Any, code: int, message: str) -> JSONResponse:
    return JSONResponse(content={"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}})


@router.get('/health')
async def health(request: Request):
    return {"status": "ok", "tools": len(request.app.state.dispatcher.catalog)}


@router.get('/api/toolset')
async def api_toolset(request: Request):
    _require_api_key(request)
    return JSONResponse(content={"tools": request.app.state.dispatcher.catalog.toolset()})


@router.post('/mcp')
async def mcp_rpc(request: Request):
    _require_api_key(request)
    dispatcher: Dispatcher = request.app.state.dispatcher

    try:
        body = await request.json()
    except ValueError:
        return _rpc_error(None, PARSE_ERROR, "Parse error")
    if not isinstance(body, dict):
        return _rpc_error(None, INVALID_REQUEST, "Request must be a JSON object")

    rpc_id = body.get('id')
    method = body.get('method')
    params = body.get('params') or {}
    if not isinstance(params, dict):
        return _rpc_error(rpc_id, INVALID_PARAMS, "params must be an object")

    if method == 'tools/list':
        return _rpc_result(rpc_id, {"tools": dispatcher.catalog.tools()})

    if method == 'tools/call':
        name = params.get('name')
        if not name:
            return _rpc_error(rpc_id, INVALID_PARAMS, "tool name required")
        logger.info(f"tools/call {name}")
        envelope = await dispatcher.dispatch_async(name, params.get('arguments'))
        result: Dict[str, Any] = {
            "content": [{"type": "text", "text": envelope.as_text()}],
            "isError": not envelope.ok,
        }
        if not envelope.ok:
            result["_meta"] = {"errorKind": envelope.error_kind}
        return _rpc_result(rpc_id, result)

    return _rpc_error(rpc_id, METHOD_NOT_FOUND, f"Unsupported method: {method}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    dispatcher = app.state.dispatcher
    logger.info(f"SQL gateway serving {len(dispatcher.catalog)} tools")
    yield
    # Release pooled connections once the app shuts down
    dispose = getattr(dispatcher.executor, "dispose", None)
    if dispose is not None:
        dispose()


def create_app(settings: Optional[Settings] = None, dispatcher: Optional[Dispatcher] = None) -> FastAPI:
    """
    Build the gateway application.

    Without an explicit dispatcher, one is wired from settings: the catalog
    uses the configured default schema and the executor connects with
    SQL_CONNECTION_STRING.
    """
    settings = settings or Settings.from_env()
    if dispatcher is None:
        if not settings.connection_string:
            raise ValueError("SQL_CONNECTION_STRING is not set")
        dispatcher = Dispatcher(
            build_catalog(settings.default_schema),
            create_executor(settings.connection_string, query_timeout=settings.query_timeout),
            query_timeout=settings.query_timeout,
        )

    app = FastAPI(title="SQL Server Tool Gateway", lifespan=lifespan)
    app.state.settings = settings
    app.state.dispatcher = dispatcher
    app.include_router(router)
    return app
