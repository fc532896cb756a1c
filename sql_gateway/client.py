import json
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class GatewayClient:
    """Async client for a running SQL gateway (JSON-RPC over HTTP)."""

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        self.tools: Dict[str, Dict[str, Any]] = {}
        self._next_id = 1

    def _client(self) -> httpx.AsyncClient:
        headers = {"x-api-key": self.api_key} if self.api_key else {}
        return httpx.AsyncClient(base_url=self.base_url, headers=headers,
                                 timeout=self.timeout, transport=self.transport)

    async def load_tools(self) -> List[str]:
        """Load available tools from the gateway's /api/toolset manifest"""
        try:
            async with self._client() as client:
                resp = await client.get("/api/toolset")
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error loading tools: {e}")
            return []

        tools_data = data.get('tools', {})
        if isinstance(tools_data, dict):
            for tool_name, tool_info in tools_data.items():
                self.tools[tool_name] = tool_info
        elif isinstance(tools_data, list):
            for tool in tools_data:
                if isinstance(tool, dict) and 'name' in tool:
                    self.tools[tool['name']] = tool
        logger.info(f"Loaded {len(self.tools)} tools")
        return list(self.tools)

    async def invoke_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Invoke a tool with a JSON-RPC tools/call request.

        Returns {"results": [...], "isError": bool} where each text content item
        is decoded as JSON when possible, or {"error": message} when the call
        itself failed.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": "tools/call",
            "params": {"name": tool_name, "arguments": arguments or {}},
        }
        self._next_id += 1

        try:
            async with self._client() as client:
                resp = await client.post("/mcp", json=payload)
        except httpx.HTTPError as e:
            error_msg = f"Tool invocation error: {e}"
            logger.error(error_msg)
            return {"error": error_msg}

        if resp.status_code != 200:
            error_msg = f"HTTP {resp.status_code}: {resp.text}"
            logger.error(f"Invocation of {tool_name} failed: {error_msg}")
            return {"error": error_msg}

        body = resp.json()
        if "error" in body:
            error = body["error"]
            return {"error": error.get("message", str(error)) if isinstance(error, dict) else str(error)}

        result = body.get("result") or {}
        parsed_results = []
        for item in result.get("content", []):
            if isinstance(item, dict) and item.get("type") == "text" and "text" in item:
                try:
                    parsed_results.append(json.loads(item["text"]))
                except json.JSONDecodeError:
                    # acknowledgments and error messages are plain text
                    parsed_results.append(item["text"])
            else:
                parsed_results.append(item)
        return {"results": parsed_results, "isError": bool(result.get("isError"))}

    def get_tool_info(self, tool_name: str) -> Dict[str, Any]:
        """Get tool information including its input schema"""
        return self.tools.get(tool_name, {})

    def get_available_tools(self) -> List[str]:
        return list(self.tools.keys())
