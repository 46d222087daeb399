import logging

import uvicorn
from starlette.applications import Starlette

from weather_mcp.config.settings import Settings, configure_logging, settings as default_settings
from weather_mcp.core.server_manager import ServerManager
from weather_mcp.server.sse_transport import create_sse_app

logger = logging.getLogger(__name__)


def build_app(settings: Settings = None) -> Starlette:
    manager = ServerManager(settings=settings or default_settings)
    manager.server_implementation()
    return create_sse_app(manager)


def run() -> None:
    configure_logging()
    default_settings.validate()
    app = build_app()
    logger.info("Weather MCP Server running on http://localhost:%d", default_settings.PORT)
    uvicorn.run(app,
                host=default_settings.HOST,
                port=default_settings.PORT,
                log_level=default_settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
