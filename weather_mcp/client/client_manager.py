import sys
from typing import Any, Dict, List, Optional

from langchain_mcp_adapters.client import MultiServerMCPClient

from weather_mcp.config.settings import Settings, settings as default_settings


class ClientManager:
    """Builds a MultiServerMCPClient pointed at the weather server.

    ``transport`` selects the binding: "stdio" spawns the server as a child
    process, "sse" connects to an already running network server.
    """

    def __init__(self,
                 transport: str = "stdio",
                 settings: Optional[Settings] = None,
                 host: str = "localhost"):
        if transport not in ("stdio", "sse"):
            raise ValueError(f"Unsupported transport: {transport}")
        self.transport: str = transport
        self.settings: Settings = settings or default_settings
        self.host: str = host
        self._client: Optional[MultiServerMCPClient] = None
        self._serverState: Optional[Dict] = None

    @property
    def is_initialised(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> MultiServerMCPClient:
        return self._client

    @property
    def sse_url(self) -> str:
        return f"http://{self.host}:{self.settings.PORT}/sse"

    def connections(self) -> Dict[str, Dict[str, Any]]:
        if self.transport == "sse":
            connection = {
                "transport": "sse",
                "url": self.sse_url,
            }
        else:
            connection = {
                "transport": "stdio",
                "command": sys.executable,
                "args": ["-m", "weather_mcp.server.stdio_server"],
            }
        return {self.settings.SERVER_NAME: connection}

    def client_initialization(self) -> MultiServerMCPClient:
        self._serverState = self.connections()
        self._client = MultiServerMCPClient(self._serverState)
        return self._client

    async def get_client_tools(self) -> List[Any]:
        if not self.is_initialised:
            self.client_initialization()

        tools = await self._client.get_tools()
        return tools
