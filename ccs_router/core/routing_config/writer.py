"""Comment-preserving edits to the routing document.

The routing document is hand-maintained. Every mutation here parses it with
ruamel.yaml in round-trip mode, touches exactly one path under ``router`` and
writes the whole document back, so comments, key order and quoting elsewhere
survive.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.error import YAMLError

from ccs_router.core.exceptions import ConfigPersistenceError
from ccs_router.core.routing_config.loader import to_plain

logger = logging.getLogger(__name__)


class RoutingConfigEditor:
    """Persists routing profiles and defaults in the routing document.

    Responsibilities:
    - Create/replace and delete entries under ``router.profiles``
    - Merge partial updates into ``router.defaults``
    - Serialize read-modify-write cycles so concurrent edits never interleave

    Last writer wins between processes; within the process a lock orders the
    edits and every write replaces the file atomically.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = Path(config_path)
        self._lock = threading.Lock()
        self._yaml = YAML()
        self._yaml.preserve_quotes = True
        self._yaml.indent(mapping=2, sequence=4, offset=2)

    def save_profile(self, name: str, profile_data: Mapping[str, Any]) -> None:
        """Add or replace ``router.profiles[name]``.

        Raises:
            ValueError: If name is empty or profile_data is not a mapping.
            ConfigPersistenceError: If the document cannot be read or written.
        """
        _require_name(name)
        if not isinstance(profile_data, Mapping):
            raise ValueError("Profile data must be a mapping")

        with self._lock:
            doc = self._load_document()
            profiles = _ensure_mapping(_ensure_mapping(doc, "router"), "profiles")
            profiles[name] = _to_commented(profile_data)
            self._write_document(doc)

        logger.info(f"Saved router profile '{name}' to {self.config_path}")

    def delete_profile(self, name: str) -> bool:
        """Remove ``router.profiles[name]``.

        Returns:
            True if the profile existed and was removed. False otherwise, in
            which case the file is left untouched.
        """
        _require_name(name)

        with self._lock:
            if not self.config_path.exists():
                return False

            doc = self._load_document()
            router = doc.get("router")
            profiles = router.get("profiles") if isinstance(router, dict) else None
            if not isinstance(profiles, dict) or name not in profiles:
                return False

            del profiles[name]
            self._write_document(doc)

        logger.info(f"Deleted router profile '{name}' from {self.config_path}")
        return True

    def update_defaults(self, partial_defaults: Mapping[str, Any]) -> None:
        """Merge ``partial_defaults`` into ``router.defaults``.

        Keys absent from ``partial_defaults`` keep their current values.
        """
        if not isinstance(partial_defaults, Mapping):
            raise ValueError("Defaults must be a mapping")

        with self._lock:
            doc = self._load_document()
            defaults = _ensure_mapping(_ensure_mapping(doc, "router"), "defaults")
            for key, value in partial_defaults.items():
                defaults[key] = _to_commented(value)
            self._write_document(doc)

        logger.info(
            f"Updated router defaults ({', '.join(sorted(partial_defaults))}) in {self.config_path}"
        )

    def get_profile(self, name: str) -> dict[str, Any] | None:
        return self.list_profiles().get(name)

    def list_profiles(self) -> dict[str, Any]:
        """Return ``router.profiles`` as plain data."""
        with self._lock:
            if not self.config_path.exists():
                return {}
            doc = self._load_document()
        router = doc.get("router")
        profiles = router.get("profiles") if isinstance(router, dict) else None
        if not isinstance(profiles, dict):
            return {}
        return to_plain(profiles)

    def _load_document(self) -> CommentedMap:
        try:
            text = self.config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return CommentedMap()
        except OSError as e:
            raise ConfigPersistenceError(self.config_path, str(e)) from e

        try:
            doc = self._yaml.load(text)
        except YAMLError as e:
            raise ConfigPersistenceError(self.config_path, f"invalid YAML: {e}") from e

        if doc is None:
            return CommentedMap()
        if not isinstance(doc, CommentedMap):
            raise ConfigPersistenceError(self.config_path, "top level must be a mapping")
        return doc

    def _write_document(self, doc: CommentedMap) -> None:
        buffer = io.StringIO()
        self._yaml.dump(doc, buffer)
        content = buffer.getvalue()

        # Replace the symlink target, not the link, and keep the file's mode
        target = self.config_path.resolve()
        tmp_path: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            if target.exists():
                shutil.copymode(target, tmp_path)
            else:
                os.chmod(tmp_path, 0o666 & ~_current_umask())
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise ConfigPersistenceError(self.config_path, str(e)) from e


def _require_name(name: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Profile name must be a non-empty string")


def _ensure_mapping(parent: CommentedMap, key: str) -> CommentedMap:
    """Return ``parent[key]``, replacing a missing or non-mapping value."""
    current = parent.get(key)
    if isinstance(current, CommentedMap):
        return current
    if current is not None:
        logger.warning(f"Replacing non-mapping value at '{key}' with an empty section")
    section = CommentedMap()
    parent[key] = section
    return section


def _to_commented(value: Any) -> Any:
    if isinstance(value, Mapping):
        node = CommentedMap()
        for k, v in value.items():
            node[k] = _to_commented(v)
        return node
    if isinstance(value, (list, tuple)):
        return [_to_commented(v) for v in value]
    return value


def _current_umask() -> int:
    # os.umask only reads by writing; callers hold the editor lock
    mask = os.umask(0)
    os.umask(mask)
    return mask
