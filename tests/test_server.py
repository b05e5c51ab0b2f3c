"""Tests for the MCP tool surface and the HTTP side endpoints."""

import asyncio
import json

import pytest
from mcp.server.fastmcp.exceptions import ToolError
from starlette.testclient import TestClient

from finance_engine import server
from finance_engine.config import ServerConfig

LIST_TOOLS = {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}
MCP_HEADERS = {"Accept": "application/json, text/event-stream"}

TOOL_NAMES = {
    "calculate_company_health_score",
    "calculate_revenue_quality_score",
    "calculate_hhi_and_diversification",
    "calculate_operating_leverage",
    "calculate_portfolio_momentum",
    "calculate_gini_coefficient",
    "calculate_organic_growth",
}


@pytest.fixture
def isolated_settings(monkeypatch):
    settings = server.mcp.settings
    for name in ("host", "port", "transport_security"):
        monkeypatch.setattr(settings, name, getattr(settings, name))
    monkeypatch.setattr(server.mcp, "_session_manager", None, raising=False)


def _call(name, arguments):
    result = asyncio.run(server.mcp.call_tool(name, arguments))
    # Newer SDKs return (content, structured_content)
    content = result[0] if isinstance(result, tuple) else result
    return json.loads(content[0].text)


def test_all_tools_are_registered_read_only():
    tools = asyncio.run(server.mcp.list_tools())
    assert {tool.name for tool in tools} == TOOL_NAMES
    for tool in tools:
        assert tool.annotations.readOnlyHint is True
        assert tool.description


def test_tool_accepts_numbers_and_decorated_strings():
    payload = _call("calculate_operating_leverage", {"revenue_growth_rate": "0.09", "cost_growth_rate": 0.06})
    assert payload["operating_leverage"] == 1.5
    assert payload["efficiency_rating"] == "Excellent"

    payload = _call("calculate_organic_growth", {"revenue_prior": "$48.70", "revenue_current": "$53.00"})
    assert payload["organic_growth_pct"] == 8.83


def test_tool_with_nested_segments():
    payload = _call(
        "calculate_portfolio_momentum",
        {"segments": {"enterprise": {"revenue": 25, "growth_rate": 0.14}, "legacy": {"revenue": 8, "growth_rate": -0.2}}},
    )
    assert payload["top_contributor"] == "enterprise"


def test_engine_errors_become_tool_errors():
    with pytest.raises(ToolError) as exc_info:
        _call("calculate_operating_leverage", {"revenue_growth_rate": 0.09, "cost_growth_rate": 0})
    assert "Calculation error: Cost growth rate cannot be zero" in str(exc_info.value)

    with pytest.raises(ToolError) as exc_info:
        _call("calculate_organic_growth", {"revenue_prior": "abc", "revenue_current": 1})
    assert "Invalid revenue_prior: Cannot parse 'abc' as a number" in str(exc_info.value)


def test_health_and_metrics_endpoints():
    client = TestClient(server.mcp.sse_app())

    health = client.get("/health")
    assert health.status_code == 200
    assert health.text == "OK"

    _call("calculate_gini_coefficient", {"revenues": [1, 2, 3]})
    scrape = client.get("/metrics")
    assert scrape.status_code == 200
    assert scrape.headers["content-type"].startswith("text/plain")
    assert "finance_requests_total" in scrape.text


def test_run_configures_http_bind_address(monkeypatch, isolated_settings):
    transports = []
    monkeypatch.setattr(server.mcp, "run", lambda transport: transports.append(transport))

    server.run(ServerConfig(transport="streamable-http", host="0.0.0.0", port=9001))

    assert transports == ["streamable-http"]
    assert server.mcp.settings.host == "0.0.0.0"
    assert server.mcp.settings.port == 9001


def test_main_exits_on_bad_configuration(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(SystemExit) as exc_info:
        server.main([])
    assert exc_info.value.code == 1


@pytest.mark.parametrize(
    "name, arguments",
    [
        (
            "calculate_company_health_score",
            {
                "revenue_growth": 0.09,
                "sla_compliance": True,
                "modern_revenue_pct": 0.377,
                "customer_satisfaction": 89,
                "pipeline_coverage": 0.849,
            },
        ),
        ("calculate_gini_coefficient", {"revenues": [True, 2, 3]}),
        ("calculate_hhi_and_diversification", {"revenues": [1, False]}),
        ("calculate_portfolio_momentum", {"segments": {"core": {"revenue": 100, "growth_rate": True}}}),
    ],
)
def test_booleans_are_not_accepted_as_numbers(name, arguments):
    with pytest.raises(ToolError):
        _call(name, arguments)


def test_transport_security_by_bind_host():
    open_bind = server.transport_security_for(ServerConfig(transport="sse", host="0.0.0.0", port=8000))
    assert open_bind.enable_dns_rebinding_protection is False

    loopback = server.transport_security_for(ServerConfig(transport="sse", host="127.0.0.1", port=8000))
    assert loopback.enable_dns_rebinding_protection is True
    assert "localhost:8000" in loopback.allowed_hosts


def _post_mcp_from(base_url):
    # The session manager runs once per instance; each client needs a fresh one
    server.mcp._session_manager = None
    app = server.mcp.streamable_http_app()
    with TestClient(app, base_url=base_url) as client:
        return client.post("/mcp", json=LIST_TOOLS, headers=MCP_HEADERS)


def test_public_bind_answers_remote_host_headers(isolated_settings):
    server.apply_config(ServerConfig(transport="streamable-http", host="0.0.0.0", port=8001))

    response = _post_mcp_from("http://10.1.2.3:8001")

    assert response.status_code != 421


def test_loopback_bind_rejects_remote_host_headers(isolated_settings):
    server.apply_config(ServerConfig(transport="streamable-http", host="127.0.0.1", port=8001))

    assert _post_mcp_from("http://10.1.2.3:8001").status_code == 421
    assert _post_mcp_from("http://127.0.0.1:8001").status_code != 421
