"""
Centralized error definitions for the dashboard aggregation run.
Every error raised out of a run is a DashboardError; its message is shown to the
end user verbatim and http_status decides how the API surfaces it.
"""
import logging

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DashboardError(Exception):
    """Base class for run-level errors with user message and HTTP status."""
    http_status: int = 500
    user_message: str = "Something went wrong. Please try again."

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(detail or self.user_message)

    @property
    def message(self) -> str:
        return str(self)


class ConfigError(DashboardError):
    """Dashboard config is unreadable, malformed, or has no usable accounts"""
    http_status = 500
    user_message = "Dashboard configuration is invalid"


class GitHubAPIError(DashboardError):
    """Non-success HTTP status from the GitHub REST API"""
    http_status = 502
    user_message = "Unknown GitHub API error"

    def __init__(self, status_code: int, path: str, message: str | None = None):
        self.status_code = status_code
        self.path = path
        self.api_message = message or self.user_message
        super().__init__(f'GitHub API {status_code} for "{path}": {self.api_message}')


class GitHubPayloadError(DashboardError):
    """GitHub returned a body that does not match the expected schema"""
    http_status = 502
    user_message = "Unexpected GitHub API response"

    def __init__(self, path: str, detail: str):
        self.path = path
        super().__init__(f'Unexpected GitHub API response for "{path}": {detail}')


class GitHubTransportError(DashboardError):
    """Request failed before GitHub sent any response"""
    http_status = 502
    user_message = "GitHub API request failed"

    def __init__(self, path: str, reason: str | None = None):
        self.path = path
        super().__init__(f'GitHub API request failed for "{path}": {reason or self.user_message}')


async def dashboard_exception_handler(request: Request, exc: DashboardError) -> JSONResponse:
    """FastAPI exception handler for DashboardError subclasses."""
    logger.warning(
        f"Dashboard error handler: {type(exc).__name__}, "
        f"path={request.url.path}, message={exc.message}"
    )
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": exc.message},
    )


async def transport_exception_handler(request: Request, exc: httpx.RequestError) -> JSONResponse:
    """Network failures that escaped the client still reach the user with their message."""
    message = str(exc) or type(exc).__name__
    logger.warning(
        f"Transport error handler: {type(exc).__name__}, "
        f"path={request.url.path}, message={message}"
    )
    return JSONResponse(
        status_code=GitHubTransportError.http_status,
        content={"detail": message},
    )


__all__ = [
    "DashboardError",
    "ConfigError",
    "GitHubAPIError",
    "GitHubPayloadError",
    "GitHubTransportError",
    "dashboard_exception_handler",
    "transport_exception_handler",
]
