"""Error type enumeration for provider health verdicts.

Provides the canonical error strings carried by unhealthy ``HealthRecord``s
so the API, the dashboard and tests compare against one definition.
"""

from enum import Enum


class ProviderErrorType(str, Enum):
    """Health error categories.

    Multiplexer providers report one of the two fixed messages below. HTTP
    checked providers carry a free-form message ("HTTP 500: Internal Server
    Error", or the transport exception text) instead.
    """

    MULTIPLEXER_NOT_RUNNING = "multiplexer not running"  # CLIProxy port closed or foreign process
    NOT_AUTHENTICATED = "not authenticated"  # No OAuth token for this provider

    def __str__(self) -> str:
        return self.value
