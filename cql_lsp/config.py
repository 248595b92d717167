"""Process configuration for the CQL language server."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9042
CONFIG_SECTION = "cql-lsp"

# field name -> environment variable
_ENV_VARS: Dict[str, str] = {
    "db_url": "CQL_LSP_DB_URL",
    "db_user": "CQL_LSP_DB_USER",
    "db_password": "CQL_LSP_DB_PASSWD",
    "connect_timeout": "CQL_LSP_DB_TIMEOUT",
    "log_level": "CQL_LSP_LOG_LEVEL",
    "log_file": "CQL_LSP_LOG_FILE",
    "indent_size": "CQL_LSP_INDENT_SIZE",
}


def default_data_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    xdg = env.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".local" / "share"


def default_log_file(environ: Optional[Mapping[str, str]] = None) -> Path:
    return default_data_dir(environ) / "cql-lsp" / "output.log"


@dataclass(frozen=True)
class ServerSettings:
    """Connection, logging and formatting settings resolved at start-up."""

    db_url: str = f"127.0.0.1:{DEFAULT_PORT}"
    db_user: str = "cassandra"
    db_password: str = "cassandra"
    connect_timeout: float = 3.0
    log_level: str = "INFO"
    log_file: Path = field(default_factory=default_log_file)
    indent_size: int = 4

    @property
    def contact_point(self) -> Tuple[str, int]:
        """Split ``db_url`` into host and port."""
        return parse_db_url(self.db_url)

    def with_overrides(self, **overrides: Any) -> "ServerSettings":
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        return _coerce(replace(self, **values))


def parse_db_url(url: str) -> Tuple[str, int]:
    text = url.strip()
    if not text:
        raise ConfigurationError("Database URL is empty", hint="Set CQL_LSP_DB_URL to host[:port]")
    host, sep, port = text.rpartition(":")
    if not sep or "]" in port:
        return text, DEFAULT_PORT
    if not port.isdigit():
        raise ConfigurationError(
            f"Invalid port in database URL '{url}'",
            hint="Use host[:port], e.g. 127.0.0.1:9042",
        )
    return host.strip("[]"), int(port)


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> ServerSettings:
    """Resolve settings from (in increasing priority) defaults, TOML file and environment."""
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {"log_file": default_log_file(env)}

    if config_path is not None:
        values.update(_read_toml_section(config_path))

    for name, variable in _ENV_VARS.items():
        raw = env.get(variable)
        if raw is None or raw == "":
            if name not in values and name in {"db_url", "db_user", "db_password"}:
                logger.info("%s wasn't provided, using default", variable)
            continue
        values[name] = raw

    return _coerce(ServerSettings(**values))


def _read_toml_section(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
    section = data.get(CONFIG_SECTION) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{CONFIG_SECTION}] in {path} must be a table")
    known = set(_ENV_VARS)
    return {key: value for key, value in section.items() if key in known}


def _coerce(settings: ServerSettings) -> ServerSettings:
    try:
        timeout = float(settings.connect_timeout)
        indent = int(settings.indent_size)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc
    if timeout <= 0:
        raise ConfigurationError("connect_timeout must be positive")
    if indent < 0:
        raise ConfigurationError("indent_size must not be negative")
    parse_db_url(str(settings.db_url))
    return replace(
        settings,
        db_url=str(settings.db_url),
        db_user=str(settings.db_user),
        db_password=str(settings.db_password),
        connect_timeout=timeout,
        log_level=str(settings.log_level).upper(),
        log_file=Path(settings.log_file).expanduser(),
        indent_size=indent,
    )


__all__ = [
    "ServerSettings",
    "load_settings",
    "parse_db_url",
    "default_data_dir",
    "default_log_file",
]
