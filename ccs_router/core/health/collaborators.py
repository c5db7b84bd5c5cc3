"""
Collaborators the health monitor consults for multiplexer providers.

The OAuth flow and the CLIProxy process are owned elsewhere; the monitor only
asks two questions through these protocols:

- is there an OAuth token for this provider? (``AuthStatusSource``)
- is the expected process listening on the multiplexer port? (``PortInspector``)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import psutil

_logger = logging.getLogger(__name__)

# CLIProxy token-file types that differ from the CCS provider name
AUTH_TYPE_ALIASES = {
    "agy": "antigravity",
    "ghcp": "github-copilot",
}

EXPECTED_PROCESS_MARKERS = ("cli-proxy-api", "cliproxy")


@dataclass(frozen=True)
class AuthStatus:
    authenticated: bool


@dataclass(frozen=True)
class ProcessInfo:
    """The process listening on a TCP port."""

    pid: int | None
    name: str
    cmdline: tuple[str, ...] = field(default_factory=tuple)


class AuthStatusSource(Protocol):
    def get_auth_status(self, provider: str) -> AuthStatus: ...


class PortInspector(Protocol):
    def get_process_on_port(self, port: int) -> ProcessInfo | None: ...

    def is_expected_process(self, info: ProcessInfo) -> bool: ...


class FileAuthStatusSource:
    """Reads OAuth state from the CLIProxy auth directory.

    CLIProxy stores one JSON token file per account, e.g.
    ``antigravity-user@example.com.json`` with ``{"type": "antigravity", ...}``.
    A provider counts as authenticated when any token file matches its auth
    type by ``type`` field or by filename prefix. No network I/O is performed.
    """

    def __init__(self, auth_dir: Path) -> None:
        self.auth_dir = Path(auth_dir)

    @staticmethod
    def auth_type_for(provider: str) -> str:
        return AUTH_TYPE_ALIASES.get(provider, provider)

    def get_auth_status(self, provider: str) -> AuthStatus:
        auth_type = self.auth_type_for(provider)
        if not self.auth_dir.is_dir():
            return AuthStatus(authenticated=False)

        for token_file in sorted(self.auth_dir.glob("*.json")):
            if token_file.name.startswith(f"{auth_type}-"):
                return AuthStatus(authenticated=True)
            try:
                with open(token_file, encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
                _logger.debug("Skipping unreadable auth file %s: %s", token_file, e)
                continue
            if isinstance(data, dict) and data.get("type") == auth_type:
                return AuthStatus(authenticated=True)

        return AuthStatus(authenticated=False)


class PsutilPortInspector:
    """Finds the listening process on a port with psutil."""

    def get_process_on_port(self, port: int) -> ProcessInfo | None:
        try:
            connections = psutil.net_connections(kind="tcp")
        except (psutil.AccessDenied, PermissionError) as e:
            _logger.debug("Cannot list connections for port %d: %s", port, e)
            return None

        for conn in connections:
            if conn.status != psutil.CONN_LISTEN or not conn.laddr or conn.laddr.port != port:
                continue
            if conn.pid is None:
                return ProcessInfo(pid=None, name="")
            try:
                process = psutil.Process(conn.pid)
                return ProcessInfo(
                    pid=conn.pid,
                    name=process.name(),
                    cmdline=tuple(process.cmdline()),
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as e:
                _logger.debug("Cannot inspect pid %s on port %d: %s", conn.pid, port, e)
                return ProcessInfo(pid=conn.pid, name="")
        return None

    def is_expected_process(self, info: ProcessInfo) -> bool:
        haystack = " ".join((info.name, *info.cmdline)).lower()
        return any(marker in haystack for marker in EXPECTED_PROCESS_MARKERS)
