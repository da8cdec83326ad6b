"""Configuration loading for the MCP server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from app.errors import HomeDirectoryUnresolved
from app.org_document import DEFAULT_STATES, TaskStates
from app.workflow_store import DEFAULT_LOCK_TIMEOUT

WORKFLOW_FILE_KEY = "ORG_MCP_WORKFLOW_FILE"
STATES_KEY = "ORG_MCP_STATES"
LOCK_TIMEOUT_KEY = "ORG_MCP_LOCK_TIMEOUT"
SERVICE_TOKEN_KEY = "ORG_MCP_SERVICE_TOKEN"

LOCAL_WORKFLOW_FILE = "workflow.org"
HOME_WORKFLOW_FILE = "~/workflow.org"


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class AppConfig:
    workflow_path: Path
    states: TaskStates = field(default_factory=TaskStates)
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    service_token: str | None = None


def _read_dotenv_value(dotenv_path: Path, key: str) -> str | None:
    """Read a single key from a .env file without mutating the environment."""
    if not dotenv_path.is_file():
        return None
    try:
        content = dotenv_path.read_text(encoding="utf-8")
    except OSError:
        return None

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].strip()
        if "=" not in stripped:
            continue
        name, value = stripped.split("=", 1)
        name = name.strip()
        if name != key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        return value or None
    return None


def _read_setting(dotenv_path: Path, key: str) -> str | None:
    raw_value = os.environ.get(key)
    if raw_value is None:
        raw_value = _read_dotenv_value(dotenv_path, key)
    if raw_value is None:
        return None
    return raw_value.strip() or None


def expand_home(raw_path: str) -> Path:
    """Expand a leading ``~/``; fail rather than guess when HOME is unknown."""
    if not raw_path.startswith("~/"):
        return Path(raw_path)
    try:
        home = Path.home()
    except (KeyError, RuntimeError) as exc:
        raise HomeDirectoryUnresolved(raw_path) from exc
    if not str(home) or str(home) == "~":
        raise HomeDirectoryUnresolved(raw_path)
    return home / raw_path[2:]


def resolve_workflow_path(raw_path: str | None, cwd: Path | None = None) -> Path:
    if raw_path:
        return expand_home(raw_path)
    local = (cwd or Path.cwd()) / LOCAL_WORKFLOW_FILE
    if local.exists():
        return local
    return expand_home(HOME_WORKFLOW_FILE)


def _parse_states(raw_value: str | None) -> TaskStates:
    if raw_value is None:
        return TaskStates(DEFAULT_STATES)
    keywords = tuple(part.strip() for part in raw_value.split(",") if part.strip())
    try:
        return TaskStates(keywords)
    except ValueError as exc:
        raise ConfigError(f"{STATES_KEY} is invalid: {exc}.") from exc


def _parse_timeout(raw_value: str | None) -> float:
    if raw_value is None:
        return DEFAULT_LOCK_TIMEOUT
    try:
        timeout = float(raw_value)
    except ValueError as exc:
        raise ConfigError(f"{LOCK_TIMEOUT_KEY} must be a number of seconds.") from exc
    if timeout <= 0:
        raise ConfigError(f"{LOCK_TIMEOUT_KEY} must be positive.")
    return timeout


def load_config() -> AppConfig:
    """Load configuration from the environment, falling back to ./.env."""
    dotenv_path = Path.cwd() / ".env"

    workflow_path = resolve_workflow_path(_read_setting(dotenv_path, WORKFLOW_FILE_KEY))

    return AppConfig(
        workflow_path=workflow_path,
        states=_parse_states(_read_setting(dotenv_path, STATES_KEY)),
        lock_timeout=_parse_timeout(_read_setting(dotenv_path, LOCK_TIMEOUT_KEY)),
        service_token=_read_setting(dotenv_path, SERVICE_TOKEN_KEY),
    )
