import json

import pytest
from httpx import AsyncClient

from sql_gateway.config import Settings
from sql_gateway.server import create_app


def rpc(method, params=None, rpc_id=1):
    return {"jsonrpc": "2.0", "id": rpc_id, "method": method, "params": params or {}}


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "tools": 31}


@pytest.mark.asyncio
async def test_tools_list_exposes_schemas(client: AsyncClient):
    response = await client.post("/mcp", json=rpc("tools/list"))
    assert response.status_code == 200
    tools = {t["name"]: t for t in response.json()["result"]["tools"]}
    assert len(tools) == 31
    create_table = tools["create_table"]["inputSchema"]
    assert create_table["required"] == ["tableName", "columns"]
    assert create_table["properties"]["columns"]["items"]["required"] == ["name", "dataType"]
    assert tools["backup_database"]["inputSchema"]["properties"]["backupType"]["enum"] == ["FULL", "DIFFERENTIAL", "LOG"]
    assert "required" not in tools["list_databases"]["inputSchema"]


@pytest.mark.asyncio
async def test_toolset_manifest(client: AsyncClient):
    response = await client.get("/api/toolset")
    assert response.status_code == 200
    assert "get_job_history" in response.json()["tools"]


@pytest.mark.asyncio
async def test_tools_call_success(client: AsyncClient, executor):
    response = await client.post("/mcp", json=rpc("tools/call", {
        "name": "get_table_count", "arguments": {"tableName": "Orders"},
    }, rpc_id=7))
    body = response.json()
    assert body["id"] == 7
    result = body["result"]
    assert result["isError"] is False
    assert json.loads(result["content"][0]["text"]) == [{"ok": 1}]
    assert executor.last_sql == "SELECT COUNT(*) as RowCount FROM [dbo].[Orders]"


@pytest.mark.asyncio
async def test_tools_call_error_is_a_normal_result(client: AsyncClient, executor):
    response = await client.post("/mcp", json=rpc("tools/call", {"name": "nonexistent_tool", "arguments": {}}))
    assert response.status_code == 200
    result = response.json()["result"]
    assert result["isError"] is True
    assert "Unknown tool" in result["content"][0]["text"]
    assert result["_meta"]["errorKind"] == "NotFound"
    assert executor.calls == []


@pytest.mark.asyncio
async def test_tools_call_requires_name(client: AsyncClient):
    response = await client.post("/mcp", json=rpc("tools/call", {"arguments": {}}))
    assert response.json()["error"]["code"] == -32602


@pytest.mark.asyncio
async def test_unsupported_method(client: AsyncClient):
    response = await client.post("/mcp", json=rpc("resources/list"))
    assert response.json()["error"]["code"] == -32601


@pytest.mark.asyncio
async def test_malformed_body(client: AsyncClient):
    response = await client.post("/mcp", content=b"{not json", headers={"content-type": "application/json"})
    assert response.json()["error"]["code"] == -32700
    response = await client.post("/mcp", json=[1, 2])
    assert response.json()["error"]["code"] == -32600


@pytest.mark.asyncio
async def test_api_key_required_when_configured(secured_client: AsyncClient):
    response = await secured_client.post("/mcp", json=rpc("tools/list"))
    assert response.status_code == 401
    response = await secured_client.post("/mcp", json=rpc("tools/list"), headers={"x-api-key": "wrong"})
    assert response.status_code == 401
    response = await secured_client.post("/mcp", json=rpc("tools/list"), headers={"x-api-key": "s3cret"})
    assert response.status_code == 200


def test_create_app_requires_connection_string():
    with pytest.raises(ValueError):
        create_app(Settings(connection_string=None))
