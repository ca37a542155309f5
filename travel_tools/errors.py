from typing import Optional


class TravelSearchError(Exception):
    """Base class for every failure a search tool can report back to the model."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TravelSearchError):
    """Caller input rejected before any network call."""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason


class NotFoundError(TravelSearchError):
    pass


class UpstreamDataError(TravelSearchError):
    """The provider answered, but not with the shape we expect."""


class UpstreamRequestError(TravelSearchError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(UpstreamRequestError):
    pass


class RateLimitError(UpstreamRequestError):
    pass


class ConfigurationError(TravelSearchError):
    pass


class UnknownToolError(TravelSearchError):
    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool {tool_name}")
        self.tool_name = tool_name
