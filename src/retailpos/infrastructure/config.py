"""Configuration loading.

Settings live in an INI file (``retailpos.ini``) with a ``[database]``
section. Every option has a default, so running without a configuration
file is allowed.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

CONFIG_FILE_NAME = "retailpos.ini"
CONFIG_ENV_VAR = "RETAILPOS_CONFIG"

DEFAULT_URL = "sqlite:///data/retailpos.db"
DEFAULT_POOL_INITIAL_SIZE = 2
DEFAULT_POOL_MAX_SIZE = 10

_SQLITE_PREFIX = "sqlite:///"


class ConfigurationError(Exception):
    """The configuration file is missing, unreadable or invalid."""


@dataclass(frozen=True)
class DatabaseSettings:
    """Typed representation of the ``[database]`` section."""

    url: str = DEFAULT_URL
    username: str = ""
    password: str = ""
    pool_initial_size: int = DEFAULT_POOL_INITIAL_SIZE
    pool_max_size: int = DEFAULT_POOL_MAX_SIZE


def find_config_file(
    explicit_path: Optional[Path] = None,
    start: Optional[Path] = None,
) -> Optional[Path]:
    """Locate the configuration file.

    An explicit path wins, then the ``RETAILPOS_CONFIG`` environment
    variable. Otherwise the search walks up from *start* (default: the
    working directory) and returns the first ``retailpos.ini`` found, or None.
    """
    if explicit_path:
        return explicit_path

    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def read_settings(config_path: Optional[Path] = None) -> DatabaseSettings:
    """Load and validate database settings.

    With no file, defaults apply and relative sqlite paths resolve against
    the working directory; with a file, against the file's directory.
    """
    if config_path is None:
        return _validated(DatabaseSettings(), base_path=Path.cwd())

    config_path = config_path.expanduser().resolve()
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read(config_path, encoding="utf-8")
    except configparser.Error as exc:
        raise ConfigurationError(f"Cannot parse {config_path}: {exc}") from exc

    return parse_settings(parser, base_path=config_path.parent)


def parse_settings(
    parser: configparser.ConfigParser,
    *,
    base_path: Optional[Path] = None,
) -> DatabaseSettings:
    """Convert a parsed INI file into :class:`DatabaseSettings`."""
    section = parser["database"] if parser.has_section("database") else {}
    settings = DatabaseSettings(
        url=section.get("url", DEFAULT_URL).strip(),
        username=section.get("username", ""),
        password=section.get("password", ""),
        pool_initial_size=_int_option(section, "pool_initial_size", DEFAULT_POOL_INITIAL_SIZE),
        pool_max_size=_int_option(section, "pool_max_size", DEFAULT_POOL_MAX_SIZE),
    )
    return _validated(settings, base_path=base_path or Path.cwd())


def _int_option(section, name: str, default: int) -> int:
    raw = section.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"[database] {name} must be an integer, got '{raw}'") from exc


def _validated(settings: DatabaseSettings, *, base_path: Path) -> DatabaseSettings:
    if settings.pool_max_size < 1:
        raise ConfigurationError("[database] pool_max_size must be at least 1")
    if not 0 <= settings.pool_initial_size <= settings.pool_max_size:
        raise ConfigurationError(
            "[database] pool_initial_size must be between 0 and pool_max_size"
        )
    if not settings.url.startswith(_SQLITE_PREFIX):
        raise ConfigurationError(
            f"[database] url must look like sqlite:///<path>, got '{settings.url}'"
        )

    path = settings.url[len(_SQLITE_PREFIX):]
    if not path:
        raise ConfigurationError("[database] url is missing a database path")
    if path != ":memory:" and not Path(path).is_absolute():
        resolved = (base_path / path).resolve()
        return DatabaseSettings(
            url=f"{_SQLITE_PREFIX}{resolved}",
            username=settings.username,
            password=settings.password,
            pool_initial_size=settings.pool_initial_size,
            pool_max_size=settings.pool_max_size,
        )
    return settings
