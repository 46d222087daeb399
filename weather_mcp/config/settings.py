from dataclasses import dataclass, field
import logging
import os
import sys
from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _env(name: str, default: str) -> str:
    return os.getenv(name) or default


@dataclass
class Settings:

    SERVER_NAME: str = field(default_factory=lambda: _env('WEATHER_SERVER_NAME', 'weather'))
    SERVER_VERSION: str = field(default_factory=lambda: _env('WEATHER_SERVER_VERSION', '1.0.0'))
    HOST: str = field(default_factory=lambda: _env('HOST', '0.0.0.0'))
    PORT: int = field(default_factory=lambda: int(_env('PORT', '3001')))
    NWS_API_BASE: str = field(default_factory=lambda: _env('NWS_API_BASE', 'https://api.weather.gov'))
    USER_AGENT: str = field(default_factory=lambda: _env('NWS_USER_AGENT', 'weather-app/1.0'))
    REQUEST_TIMEOUT: float = field(default_factory=lambda: float(_env('NWS_REQUEST_TIMEOUT', '30.0')))
    LOG_LEVEL: str = field(default_factory=lambda: _env('LOG_LEVEL', 'INFO').upper())

    def validate(self) -> bool:

        if not 0 < self.PORT < 65536:
            raise ValueError(f"PORT must be between 1 and 65535, got {self.PORT}")

        if self.REQUEST_TIMEOUT <= 0:
            raise ValueError("NWS_REQUEST_TIMEOUT must be a positive number of seconds")

        if self.LOG_LEVEL not in LOG_LEVELS:
            raise ValueError(f"Unknown LOG_LEVEL: {self.LOG_LEVEL}")

        return True


def configure_logging(level: str = None) -> None:
    """Send log records to stderr; stdout belongs to the stdio transport."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


settings = Settings()
