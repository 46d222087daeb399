import logging
from typing import Dict, Optional

from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from fastmcp import FastMCP
from mcp.shared.message import SessionMessage

from weather_mcp.config.settings import Settings, settings as default_settings
from weather_mcp.tools.registry import ToolSpec, build_tool_table, register_tools
from weather_mcp.tools.weather import WeatherService

logger = logging.getLogger(__name__)

INSTRUCTIONS = "Use these tools to fetch active US weather alerts and forecasts."


class ServerManager:
    """Transport-agnostic service core shared by the stdio and SSE bootstraps."""

    def __init__(self,
                 settings: Optional[Settings] = None,
                 weather_service: Optional[WeatherService] = None):
        self.settings: Settings = settings or default_settings
        self.weather_service: WeatherService = weather_service or WeatherService(
            base_url=self.settings.NWS_API_BASE,
            user_agent=self.settings.USER_AGENT,
            timeout=self.settings.REQUEST_TIMEOUT,
        )
        self.tools: Dict[str, ToolSpec] = build_tool_table(self.weather_service)
        self._server: Optional[FastMCP] = None

    @property
    def server(self) -> FastMCP:
        if not self._server:
            raise RuntimeError("Server not initialized. Call server_implementation first.")
        return self._server

    @property
    def is_initialised(self) -> bool:
        return self._server is not None

    def server_implementation(self, instructions: str = INSTRUCTIONS) -> FastMCP:
        """Initializes the FastMCP server instance and registers the tool table."""
        self._server = FastMCP(
            name=self.settings.SERVER_NAME,
            instructions=instructions,
            version=self.settings.SERVER_VERSION,
        )
        register_tools(self._server, self.tools)
        logger.debug("Registered tools: %s", ", ".join(self.tools))
        return self._server

    async def run_session(self,
                          read_stream: MemoryObjectReceiveStream[SessionMessage | Exception],
                          write_stream: MemoryObjectSendStream[SessionMessage]) -> None:
        """Serve one protocol session over a pair of message streams.

        Returns when the read stream is closed by the transport.
        """
        low_level = self.server._mcp_server
        await low_level.run(
            read_stream,
            write_stream,
            low_level.create_initialization_options(),
        )
