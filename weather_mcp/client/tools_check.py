import asyncio
import sys

from weather_mcp.client.client_manager import ClientManager


async def main(transport: str = "stdio") -> None:
    manager = ClientManager(transport=transport)
    tools = await manager.get_client_tools()

    for tool in tools:
        print(f"{tool.name}: {tool.description}")


def run() -> None:
    """List the weather server's tools: ``weather-mcp-tools [stdio|sse]``."""
    transport = sys.argv[1] if len(sys.argv) > 1 else "stdio"
    asyncio.run(main(transport))


if __name__ == "__main__":
    run()
