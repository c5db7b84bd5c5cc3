"""Routing configuration loading from the CCS YAML document.

The document is re-read on every call: edits made by the Config Editor, the
dashboard or a human must be visible to the next resolution without a
restart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ccs_router.core.exceptions import RoutingConfigError

DEFAULT_ADAPTER = "anthropic"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiProviderConfig:
    """A remote-API provider entry under ``router.providers``."""

    base_url: str
    auth_env: str | None = None
    adapter: str = DEFAULT_ADAPTER
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, name: str, data: Any) -> "ApiProviderConfig":
        if not isinstance(data, dict):
            raise ValueError(f"router.providers.{name} must be a mapping")
        base_url = data.get("base_url")
        if not isinstance(base_url, str) or not base_url:
            raise ValueError(f"router.providers.{name}.base_url is required")
        auth_env = data.get("auth_env")
        if auth_env is not None and not isinstance(auth_env, str):
            raise ValueError(f"router.providers.{name}.auth_env must be a string")
        headers = data.get("headers") or {}
        if not isinstance(headers, dict):
            raise ValueError(f"router.providers.{name}.headers must be a mapping")
        return cls(
            base_url=base_url,
            auth_env=auth_env or None,
            adapter=str(data.get("adapter") or DEFAULT_ADAPTER),
            headers={str(k): str(v) for k, v in headers.items()},
        )


@dataclass
class RoutingConfig:
    """Inputs to provider resolution, as persisted in the routing document.

    Attributes:
        credential_profiles: Profile name to settings-file path
        api_providers: Remote-API provider name to its definition
        routing_profiles: Routing profiles written by the Config Editor
        defaults: Routing defaults written by the Config Editor
    """

    credential_profiles: dict[str, str] = field(default_factory=dict)
    api_providers: dict[str, ApiProviderConfig] = field(default_factory=dict)
    routing_profiles: dict[str, Any] = field(default_factory=dict)
    defaults: dict[str, Any] = field(default_factory=dict)

    def conflicting_names(self) -> list[str]:
        """Names defined both as a credential profile and a remote-API provider."""
        return sorted(set(self.credential_profiles) & set(self.api_providers))


def to_plain(node: Any) -> Any:
    """Convert ruamel round-trip containers into plain dicts and lists."""
    if isinstance(node, dict):
        return {str(k): to_plain(v) for k, v in node.items()}
    if isinstance(node, list):
        return [to_plain(v) for v in node]
    return node


class RoutingConfigLoader:
    """Reads the routing document into a RoutingConfig.

    Malformed individual entries are skipped with a warning so one bad
    provider definition does not hide the others. A document that cannot be
    parsed at all raises RoutingConfigError.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = Path(config_path)
        self._yaml = YAML(typ="safe")

    def read_document(self) -> dict[str, Any]:
        """Return the raw document as plain data ({} when the file is absent)."""
        try:
            text = self.config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise RoutingConfigError(self.config_path, str(e)) from e

        try:
            data = self._yaml.load(text)
        except YAMLError as e:
            raise RoutingConfigError(self.config_path, str(e)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RoutingConfigError(self.config_path, "top level must be a mapping")
        return to_plain(data)

    def load(self) -> RoutingConfig:
        """Load the routing configuration.

        Raises:
            RoutingConfigError: If the document exists but is not valid YAML.
        """
        document = self.read_document()
        routing = RoutingConfig()

        profiles = document.get("profiles") or {}
        if isinstance(profiles, dict):
            for name, entry in profiles.items():
                settings_path = entry.get("settings") if isinstance(entry, dict) else None
                if isinstance(settings_path, str) and settings_path:
                    routing.credential_profiles[name] = settings_path
                else:
                    logger.warning(f"Ignoring profile '{name}': missing 'settings' path")
        else:
            logger.warning("Ignoring 'profiles' section: not a mapping")

        router = document.get("router") or {}
        if not isinstance(router, dict):
            logger.warning("Ignoring 'router' section: not a mapping")
            return routing

        providers = router.get("providers") or {}
        if isinstance(providers, dict):
            for name, entry in providers.items():
                try:
                    routing.api_providers[name] = ApiProviderConfig.from_mapping(name, entry)
                except ValueError as e:
                    logger.warning(f"Ignoring API provider '{name}': {e}")

        if isinstance(router.get("profiles"), dict):
            routing.routing_profiles = router["profiles"]
        if isinstance(router.get("defaults"), dict):
            routing.defaults = router["defaults"]

        return routing
