import asyncio
import logging
import sys

from weather_mcp.config.settings import configure_logging, settings
from weather_mcp.core.server_manager import ServerManager

logger = logging.getLogger(__name__)


async def main(manager: ServerManager = None) -> None:
    # 1. Initialize Manager
    manager = manager or ServerManager()

    # 2. Create Server Instance (tools are registered from the static table)
    mcp = manager.server_implementation()

    # 3. Serve the single stdio session until the client closes the pipe
    logger.info("Weather MCP Server running on stdio")
    await mcp.run_async(transport="stdio", show_banner=False)


def run() -> None:
    configure_logging()
    try:
        settings.validate()
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error in main()")
        sys.exit(1)


if __name__ == "__main__":
    run()
