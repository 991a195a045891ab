"""Settings resolution: command line, then config file, then defaults.

The config file lives at ``$HOME/.pr-checker/config.json`` and holds a JSON
object such as::

    {"AccessToken": "ghp_...", "OrgName": "acme", "Ugly": true}

Keys are matched ignoring case, ``_`` and ``-``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".pr-checker"
CONFIG_FILE_NAME = "config.json"

MAX_DAYS = 3650

# normalized file key -> (Settings field, expected type)
_FILE_KEYS: dict[str, tuple[str, type | tuple[type, ...]]] = {
    "accesstoken": ("token", str),
    "token": ("token", str),
    "orgname": ("org", str),
    "org": ("org", str),
    "ugly": ("plain", bool),
    "plain": ("plain", bool),
    "concurrency": ("concurrency", int),
    "days": ("days", int),
    "draftsfirst": ("drafts_first", bool),
    "allowpartial": ("allow_partial", bool),
    "apiurl": ("api_url", str),
    "verifyssl": ("verify_ssl", bool),
    "excluderepos": ("exclude_repos", list),
}


@dataclass
class Settings:
    token: str = ""
    org: str = ""
    plain: bool = False
    concurrency: int = 8
    days: int = 14
    drafts_first: bool = False
    allow_partial: bool = False
    api_url: str | None = None
    verify_ssl: bool = True
    exclude_repos: list[str] = field(default_factory=list)

    def missing(self) -> list[str]:
        """Names of required parameters that are still empty."""
        missing = []
        if not self.token:
            missing.append("token")
        if not self.org:
            missing.append("org")
        return missing


def config_path(home: Path | None = None) -> Path:
    """Return the config file path under the user's home directory."""
    if home is None:
        try:
            home = Path.home()
        except RuntimeError as exc:
            raise ConfigError(f"no user home directory. Error: {exc}") from exc
        # Python < 3.12 returns "~" unexpanded when no home can be found
        if home == Path("~"):
            raise ConfigError("no user home directory")
    return home / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _normalize_key(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


def _check_type(key: str, value: Any, expected: type | tuple[type, ...]) -> None:
    # bool is an int subclass; "Concurrency": true is not a number
    if expected is int and isinstance(value, bool):
        raise ConfigError(f"config key '{key}' must be an integer")
    if not isinstance(value, expected):
        raise ConfigError(
            f"config key '{key}' has invalid type {type(value).__name__}"
        )
    if expected is list and not all(isinstance(v, str) for v in value):
        raise ConfigError(f"config key '{key}' must be a list of strings")


def parse_config(data: Any) -> dict[str, Any]:
    """Map a decoded config object onto Settings field names."""
    if not isinstance(data, dict):
        raise ConfigError("config file must contain a JSON object")
    values: dict[str, Any] = {}
    for key, value in data.items():
        entry = _FILE_KEYS.get(_normalize_key(str(key)))
        if entry is None:
            logger.debug("Ignoring unknown config key %r", key)
            continue
        name, expected = entry
        if value is None:
            continue
        _check_type(key, value, expected)
        values[name] = value
    return values


def load_config_file(path: Path) -> dict[str, Any]:
    """Read the config file; a missing file yields no values."""
    if not path.exists():
        logger.debug("No config file at %s", path)
        return {}
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config file {path}. Error: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"failed to parse config file {path}. Error: {exc}") from exc
    values = parse_config(data)
    logger.info("Loaded config from %s", path)
    return values


def resolve_settings(
    cli_values: dict[str, Any], file_values: dict[str, Any] | None = None
) -> Settings:
    """Merge sources field by field: CLI value if set, else file, else default.

    A CLI value of ``None`` means the option was not given. For list options
    an empty sequence also counts as not given.
    """
    file_values = file_values or {}
    merged: dict[str, Any] = {}
    for f in fields(Settings):
        cli_value = cli_values.get(f.name)
        if f.name == "exclude_repos" and cli_value is not None and not cli_value:
            cli_value = None
        if cli_value is not None:
            merged[f.name] = list(cli_value) if f.name == "exclude_repos" else cli_value
        elif f.name in file_values:
            merged[f.name] = file_values[f.name]
    settings = Settings(**merged)
    if settings.concurrency < 1:
        raise ConfigError("concurrency must be at least 1")
    if not 1 <= settings.days <= MAX_DAYS:
        raise ConfigError(f"days must be between 1 and {MAX_DAYS}")
    return settings
