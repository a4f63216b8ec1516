"""Client library for the remote users REST API.

Architecture:
- client.py: HTTP client with bearer credential and error normalization
- users.py: The four collection operations (list, create, update, delete)
- exceptions.py: Typed exceptions for error handling

Usage:
    from usermirror.core.gorest import UsersApiClient, UserGateway

    client = UsersApiClient("https://gorest.co.in/public-api", token="...")
    gateway = UserGateway(client)
    users = gateway.list_users()
"""
from .client import (
    UsersApiClient,
    DEFAULT_BASE_URL,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    GatewayError,
    TransportError,
    ResponseFormatError,
    ValidationError,
)
from .users import (
    UserGateway,
    build_gateway,
)

__all__ = [
    # Client
    "UsersApiClient",
    "DEFAULT_BASE_URL",
    "REQUEST_TIMEOUT",

    # Exceptions
    "GatewayError",
    "TransportError",
    "ResponseFormatError",
    "ValidationError",

    # Gateway
    "UserGateway",
    "build_gateway",
]
