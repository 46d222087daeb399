from typing import Any, Awaitable, Callable, Dict, NamedTuple

from fastmcp import FastMCP

from weather_mcp.tools.weather import WeatherService


class ToolSpec(NamedTuple):
    handler: Callable[..., Awaitable[Any]]
    description: str


def build_tool_table(service: WeatherService) -> Dict[str, ToolSpec]:
    """Tool name -> handler table. The handler signature is the tool's schema."""
    return {
        "get_alerts": ToolSpec(
            handler=service.get_alerts,
            description="Get weather alerts for a US state (two-letter code, e.g. CA, NY).",
        ),
        "get_forecast": ToolSpec(
            handler=service.get_forecast,
            description="Get the weather forecast for a latitude/longitude.",
        ),
    }


def register_tools(server: FastMCP, table: Dict[str, ToolSpec]) -> None:
    # FastMCP automatically handles 'async def' functions correctly
    for name, tool in table.items():
        server.tool(name=name, description=tool.description)(tool.handler)
