"""Settings groups loaded from the environment schema.

Each group is a frozen dataclass with a ``load()`` constructor so the
components that need it can receive it through dependency injection.
"""

from dataclasses import dataclass
from pathlib import Path

from ccs_router.core.config.schema import ConfigSchema
from ccs_router.core.config.validation import load_env_var


@dataclass(frozen=True)
class ServerSettings:
    """Router API bind address and log level."""

    host: str
    port: int
    log_level: str

    @staticmethod
    def load() -> "ServerSettings":
        return ServerSettings(
            host=load_env_var(ConfigSchema.HOST),
            port=load_env_var(ConfigSchema.PORT),
            log_level=load_env_var(ConfigSchema.LOG_LEVEL),
        )


@dataclass(frozen=True)
class PathSettings:
    """Filesystem locations of the routing document and CLIProxy auth files."""

    ccs_home: Path
    config_path: Path

    @property
    def cliproxy_auth_dir(self) -> Path:
        return self.ccs_home / "cliproxy" / "auth"

    @staticmethod
    def load() -> "PathSettings":
        ccs_home = Path(load_env_var(ConfigSchema.CCS_HOME)).expanduser()
        raw_config_path = load_env_var(ConfigSchema.CCS_CONFIG_PATH)
        config_path = (
            Path(raw_config_path).expanduser() if raw_config_path else ccs_home / "config.yaml"
        )
        return PathSettings(ccs_home=ccs_home, config_path=config_path)


@dataclass(frozen=True)
class MultiplexerSettings:
    """Where the local CLIProxy multiplexer listens."""

    host: str
    port: int

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @staticmethod
    def load() -> "MultiplexerSettings":
        return MultiplexerSettings(
            host=load_env_var(ConfigSchema.CCS_CLIPROXY_HOST),
            port=load_env_var(ConfigSchema.CCS_CLIPROXY_PORT),
        )


@dataclass(frozen=True)
class HealthSettings:
    """Health cache TTL and check/request timeouts, in seconds."""

    cache_ttl: float
    check_timeout: float
    request_timeout: float

    @staticmethod
    def load() -> "HealthSettings":
        return HealthSettings(
            cache_ttl=load_env_var(ConfigSchema.CCS_HEALTH_CACHE_TTL),
            check_timeout=load_env_var(ConfigSchema.CCS_HEALTH_CHECK_TIMEOUT),
            request_timeout=load_env_var(ConfigSchema.CCS_REQUEST_TIMEOUT),
        )
