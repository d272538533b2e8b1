"""
Tests for the plain HTTP transport.

Exercises the FastAPI app through TestClient; no socket is opened.
"""
import re

import pytest
from fastapi.testclient import TestClient

from conftest import tool_call
from mcp_server import HTTPConfig, HTTPTransport, create_http_app


class TestHealth:

    def test_health(self, http_client):
        response = http_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.1.0"
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", data["timestamp"])
        assert "uptime" in data

    def test_tools_shortcut(self, http_client):
        response = http_client.get("/tools")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "tools-list"
        assert {tool["name"] for tool in data["result"]["tools"]} == {"basic_math", "statistics", "unit_conversion", "financial"}

    def test_metrics_count_requests(self, http_client):
        http_client.post("/mcp", json=tool_call("basic_math", {"operation": "add", "operands": [1, 2]}))
        http_client.post("/mcp", json=tool_call("missing"))

        response = http_client.get("/metrics")

        assert response.status_code == 200
        data = response.json()
        assert data["server"]["transport"] == "http"
        assert data["server"]["version"] == "1.1.0"
        assert data["requests"] == {"total": 2, "success": 1, "errors": 1}


class TestMCPEndpoint:

    def test_tool_call_success(self, http_client):
        response = http_client.post("/mcp", json=tool_call("basic_math", {"operation": "add", "operands": [5, 3]}))

        assert response.status_code == 200
        data = response.json()
        assert data["jsonrpc"] == "2.0"
        assert data["id"] == 1
        assert data["result"]["content"] == [{"type": "text", "text": "8"}]

    def test_initialize(self, http_client):
        response = http_client.post("/mcp", json={"jsonrpc": "2.0", "id": "init", "method": "initialize"})

        assert response.status_code == 200
        assert response.json()["result"]["protocolVersion"] == "2024-11-05"

    def test_unknown_tool_is_404(self, http_client):
        response = http_client.post("/mcp", json=tool_call("nope", {}))

        assert response.status_code == 404
        assert response.json()["error"] == {"code": -32601, "message": "Tool not found", "data": "nope"}

    def test_unknown_method_is_404(self, http_client):
        response = http_client.post("/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "prompts/list"})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == -32601

    def test_invalid_params_is_400(self, http_client):
        response = http_client.post("/mcp", json={"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": "x"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32602

    def test_tool_failure_is_500(self, http_client):
        response = http_client.post("/mcp", json=tool_call("basic_math", {"operation": "divide", "operands": [4, 0]}))

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == -32603
        assert error["data"] == "division by zero"

    def test_invalid_json_is_400(self, http_client):
        response = http_client.post("/mcp", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        data = response.json()
        assert data["id"] is None
        assert data["error"]["code"] == -32600
        assert data["error"]["message"] == "Invalid JSON-RPC request"

    def test_invalid_request_echoes_id(self, http_client):
        response = http_client.post(
            "/mcp",
            content=b'{"jsonrpc":"2.0","id":17,"method":[]}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["id"] == 17

    @pytest.mark.parametrize("body", [
        b'{"jsonrpc":"2.0","id":NaN,"method":"initialize"}',
        b'{"jsonrpc":"2.0","id":Infinity,"method":"initialize"}',
        b'{"jsonrpc":"2.0","id":-1e400,"method":"initialize"}',
    ])
    def test_non_standard_numbers_are_400(self, http_client, body):
        response = http_client.post("/mcp", content=body, headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        data = response.json()
        assert data["id"] is None
        assert data["error"]["code"] == -32600

    def test_wrong_content_type_is_400(self, http_client):
        response = http_client.post(
            "/mcp",
            content=b'{"jsonrpc":"2.0","id":1,"method":"initialize"}',
            headers={"Content-Type": "text/plain"},
        )

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/plain")
        assert "application/json" in response.text

    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    def test_other_verbs_are_plain_text_405(self, http_client, method):
        response = http_client.request(method, "/mcp")

        assert response.status_code == 405
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Method not allowed\n"

    def test_options_without_cors_is_405(self, mcp_server, error_config):
        app = create_http_app(mcp_server, HTTPConfig(cors_enabled=False), error_config)
        response = TestClient(app).options("/mcp")

        assert response.status_code == 405
        assert response.headers["content-type"].startswith("text/plain")


class TestHeaders:

    def test_preflight(self, http_client):
        response = http_client.options("/mcp", headers={"Origin": "http://x.test"})

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "http://x.test"
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert response.headers["access-control-max-age"] == "86400"

    def test_cors_headers_on_post(self, http_client):
        response = http_client.post(
            "/mcp",
            json={"jsonrpc": "2.0", "id": 1, "method": "initialize"},
            headers={"Origin": "http://x.test"},
        )

        assert response.headers["access-control-allow-origin"] == "http://x.test"

    def test_origin_outside_allow_list(self, mcp_server, error_config):
        app = create_http_app(mcp_server, HTTPConfig(cors_origins=["http://allowed.test"]), error_config)
        client = TestClient(app)

        allowed = client.options("/mcp", headers={"Origin": "http://allowed.test"})
        denied = client.options("/mcp", headers={"Origin": "http://other.test"})

        assert allowed.headers["access-control-allow-origin"] == "http://allowed.test"
        assert "access-control-allow-origin" not in denied.headers

    def test_cors_disabled(self, mcp_server, error_config):
        app = create_http_app(mcp_server, HTTPConfig(cors_enabled=False), error_config)
        response = TestClient(app).get("/health", headers={"Origin": "http://x.test"})

        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers

    def test_request_id_is_echoed(self, http_client):
        response = http_client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["x-request-id"] == "req-123"

    def test_request_id_is_generated(self, http_client):
        assert http_client.get("/health").headers["x-request-id"]


def test_transport_uses_config(mcp_server, error_config):
    transport = HTTPTransport(mcp_server, HTTPConfig(host="127.0.0.1", port=9123), error_config)

    assert transport.addr == "127.0.0.1:9123"
    assert transport.name == "http"
