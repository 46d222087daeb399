from fastmcp.exceptions import ToolError


class WeatherDataUnavailable(ToolError):
    """The weather service could not be reached or returned unusable data."""


class DuplicateSessionError(KeyError):
    """A session id was registered twice while the first one is still open."""
