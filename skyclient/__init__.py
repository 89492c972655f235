"""Python client SDK for the Skygear backend-as-a-service."""

from .container import Container
from .errors import (
    AccessTokenNotAccepted,
    ConfigurationError,
    ErrorCodes,
    LoginResultMissing,
    NetworkError,
    ServerError,
    SkyClientError,
    UnauthorizedCallbackDomain,
    UserCancelled,
)
from .platform import PlatformBundle, desktop_platform, web_platform
from .session import Session
from .sso import SSOAuth

__version__ = Container.VERSION

__all__ = [
    "Container",
    "SSOAuth",
    "Session",
    "PlatformBundle",
    "web_platform",
    "desktop_platform",
    "ErrorCodes",
    "SkyClientError",
    "ConfigurationError",
    "NetworkError",
    "ServerError",
    "AccessTokenNotAccepted",
    "UserCancelled",
    "UnauthorizedCallbackDomain",
    "LoginResultMissing",
]
