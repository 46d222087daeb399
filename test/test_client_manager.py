import sys

import anyio
import pytest
from langchain_mcp_adapters.client import MultiServerMCPClient

from weather_mcp.client.client_manager import ClientManager
from weather_mcp.client import tools_check


def test_stdio_connection_spawns_server_module(test_settings):
    manager = ClientManager(settings=test_settings)
    assert manager.connections() == {
        "weather": {
            "transport": "stdio",
            "command": sys.executable,
            "args": ["-m", "weather_mcp.server.stdio_server"],
        }
    }


def test_sse_connection_uses_configured_port(test_settings):
    manager = ClientManager(transport="sse", settings=test_settings)
    assert manager.connections()["weather"] == {
        "transport": "sse",
        "url": "http://localhost:3999/sse",
    }


def test_client_initialization(test_settings):
    manager = ClientManager(transport="sse", settings=test_settings)
    assert not manager.is_initialised
    client = manager.client_initialization()
    assert isinstance(client, MultiServerMCPClient)
    assert manager.is_initialised


def test_unknown_transport():
    with pytest.raises(ValueError, match="Unsupported transport"):
        ClientManager(transport="websocket")


@pytest.mark.anyio
async def test_get_client_tools_over_stdio(test_settings):
    manager = ClientManager(settings=test_settings)

    with anyio.fail_after(60):
        tools = await manager.get_client_tools()

    assert manager.is_initialised
    assert {tool.name for tool in tools} == {"get_alerts", "get_forecast"}


@pytest.mark.anyio
async def test_tools_check_lists_tools(monkeypatch, capsys):
    class FakeTool:
        def __init__(self, name, description):
            self.name, self.description = name, description

    async def fake_tools(self):
        return [FakeTool("get_alerts", "Get weather alerts")]

    monkeypatch.setattr(ClientManager, "get_client_tools", fake_tools)
    await tools_check.main("sse")

    assert capsys.readouterr().out == "get_alerts: Get weather alerts\n"
