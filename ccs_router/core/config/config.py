"""Configuration singleton for CCS Router.

Configuration is organized into focused settings groups:
- server: API bind address and log level
- paths: CCS home, routing document, CLIProxy auth directory
- multiplexer: local CLIProxy host and port
- health: health cache TTL and timeouts
"""

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from ccs_router.core.config.settings import (
    HealthSettings,
    MultiplexerSettings,
    PathSettings,
    ServerSettings,
)
from ccs_router.core.config.validation import validate_all

if TYPE_CHECKING:
    from ccs_router.core.context import RouterContext

logger = logging.getLogger(__name__)


class Config:
    """Configuration singleton with direct access to all settings.

    All values are loaded at initialization time from environment variables
    using schema-based validation. The router context (resolver, health
    monitor, config editor, routed client) is created lazily on first access.
    """

    def __init__(self) -> None:
        errors = validate_all()
        if errors:
            for error in errors:
                logger.error(f"Configuration error: {error}")
            raise errors[0]

        self._server = ServerSettings.load()
        self._paths = PathSettings.load()
        self._multiplexer = MultiplexerSettings.load()
        self._health = HealthSettings.load()

        self._context: "RouterContext | None" = None
        self._context_lock = threading.Lock()

    # Server settings
    @property
    def host(self) -> str:
        return self._server.host

    @property
    def port(self) -> int:
        return self._server.port

    @property
    def log_level(self) -> str:
        return self._server.log_level

    # Paths
    @property
    def ccs_home(self) -> Path:
        return self._paths.ccs_home

    @property
    def config_path(self) -> Path:
        return self._paths.config_path

    @property
    def cliproxy_auth_dir(self) -> Path:
        return self._paths.cliproxy_auth_dir

    # Multiplexer settings
    @property
    def cliproxy_port(self) -> int:
        return self._multiplexer.port

    @property
    def cliproxy_base_url(self) -> str:
        return self._multiplexer.base_url

    # Health settings
    @property
    def health_cache_ttl(self) -> float:
        return self._health.cache_ttl

    @property
    def health_check_timeout(self) -> float:
        return self._health.check_timeout

    @property
    def request_timeout(self) -> float:
        return self._health.request_timeout

    @property
    def context(self) -> "RouterContext":
        """Get or create the process-wide router context.

        Thread-safe: uses double-check locking so only one context (and so
        one health cache) exists per Config instance.
        """
        if self._context is None:
            with self._context_lock:
                if self._context is None:
                    from ccs_router.core.context import RouterContext

                    self._context = RouterContext.from_config(self)
        return self._context


# Module-level singleton
config = Config()
