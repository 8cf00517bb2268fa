"""Persistent libraryview configuration (server URL, timeouts).

Reads and writes ~/.config/libraryview/config.toml (or the equivalent under
$XDG_CONFIG_HOME) with tomli/tomli-w, and resolves individual settings with
the precedence CLI > environment > config file > default.
"""

import contextlib
import os
from pathlib import Path
from typing import Any, TypeVar, cast

import tomli
import tomli_w

# Determine config directory respecting XDG_CONFIG_HOME if set.
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
CONFIG_DIR = _xdg_config_home / "libraryview"
CONFIG_FILE = CONFIG_DIR / "config.toml"

ENV_PREFIX = "LIBRARYVIEW_"
_TRUTHY = {"1", "true", "yes", "on"}

T = TypeVar("T")


def read_config() -> dict[str, Any]:
    """Read the TOML config file, returning an empty dict if it is missing."""
    if not CONFIG_FILE.exists():
        return {}
    with CONFIG_FILE.open("rb") as f:
        return tomli.load(f)


def write_config_value(dotted_key: str, value: Any) -> None:
    """Store *value* under *dotted_key* (e.g. ``server.url``) in config.toml."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    data = read_config()
    *parents, leaf = dotted_key.split(".")
    section = data
    for part in parents:
        section = section.setdefault(part, {})
    section[leaf] = value
    with CONFIG_FILE.open("wb") as f:
        tomli_w.dump(data, f)


def _lookup_nested(data: dict[str, Any], dotted_key: str) -> Any | None:
    """Return ``data["a"]["b"]`` for ``"a.b"``, or None if any level is missing."""
    current: Any = data
    for part in dotted_key.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def env_var_name(dotted_key: str) -> str:
    """``"server.url"`` -> ``"LIBRARYVIEW_SERVER_URL"``."""
    return ENV_PREFIX + dotted_key.replace(".", "_").upper()


def _coerce(raw: Any, default: T) -> T:
    """Best-effort conversion of *raw* to the type of *default*."""
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return cast(T, raw)
        if isinstance(raw, str):
            return cast(T, raw.lower() in _TRUTHY)
        return default
    if isinstance(default, (int, float)):
        target = type(default)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return cast(T, target(raw))
        if isinstance(raw, str):
            with contextlib.suppress(ValueError):
                return cast(T, target(raw))
        return default
    return cast(T, raw)


def resolve_setting(key: str, *, default: T, cli_value: T | None = None) -> T:
    """Resolve *key* using precedence CLI > env > config file > default.

    Args:
        key: Dotted key path, e.g. ``"server.url"``.
        default: Fallback value; its type drives coercion of env/file values.
        cli_value: Value passed on the command line, None when not given.

    Returns:
        The resolved value.
    """
    if cli_value is not None:
        return cli_value

    env_var = env_var_name(key)
    if env_var in os.environ:
        return _coerce(os.environ[env_var], default)

    file_val = _lookup_nested(read_config(), key)
    if file_val is not None:
        return _coerce(file_val, default)

    return default


def get_server_url(default: str, cli_value: str | None = None) -> str:
    """Resolve the library server URL."""
    return resolve_setting("server.url", default=default, cli_value=cli_value).rstrip("/")


def set_server_url(url: str) -> None:
    """Persist the library server URL to config.toml."""
    write_config_value("server.url", url.rstrip("/"))
