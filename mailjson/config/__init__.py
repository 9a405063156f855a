"""Configuration management module.

Handles loading, saving, and accessing the mailjson configuration.
Config is stored at ~/.config/mailjson/config.toml

Usage:
    from mailjson.config import load_config, get_defaults

    defaults = get_defaults(load_config())
"""

import tomllib

import tomli_w

from .paths import CONFIG_FILE, ensure_config_dir
from .schema import DefaultsConfig, MailjsonConfig
from .template import CONFIG_TEMPLATE

__all__ = [
    "load_config",
    "save_config",
    "init_config",
    "get_defaults",
    "set_config_value",
    "BUILTIN_DEFAULTS",
    "CONFIG_FILE",
]

# Values used when the config file is missing or leaves a key out
BUILTIN_DEFAULTS: DefaultsConfig = {
    "output_dir": ".",
    "use_netrc": True,
    "fetch_batch_size": 100,
    "logout_timeout": 30,
}

# Module-level cache for loaded config.
# Avoids repeated disk reads during a single CLI invocation.
_cached_config: MailjsonConfig | None = None


def load_config(*, force_reload: bool = False) -> MailjsonConfig:
    """Load configuration from disk.

    Returns empty dict if config file doesn't exist.
    Uses module-level caching to avoid repeated disk reads.

    Args:
        force_reload: Bypass cache and read from disk (useful after saving).

    Returns:
        The configuration dictionary.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    if not CONFIG_FILE.exists():
        _cached_config = {}
        return _cached_config

    with open(CONFIG_FILE, "rb") as f:
        _cached_config = tomllib.load(f)

    return _cached_config


def save_config(config: MailjsonConfig) -> None:
    """Save configuration to disk and update the module cache."""
    global _cached_config

    ensure_config_dir()

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(config, f)

    _cached_config = config


def init_config(*, overwrite: bool = False) -> bool:
    """Initialize config directory and create template config file.

    Args:
        overwrite: If True, overwrite existing config file.

    Returns:
        True if config was created, False if it already existed.
    """
    ensure_config_dir()

    if CONFIG_FILE.exists() and not overwrite:
        return False

    CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    return True


def get_defaults(config: MailjsonConfig) -> DefaultsConfig:
    """Merge the [defaults] table over the built-in defaults.

    String values for typed fields are converted as `config set` would;
    anything else of the wrong type is rejected.

    Raises:
        ValueError: If a value has the wrong type for its field.
    """
    merged: DefaultsConfig = dict(BUILTIN_DEFAULTS)  # type: ignore[assignment]
    for key, value in config.get("defaults", {}).items():
        merged[key] = _check_default(key, value)  # type: ignore[literal-required]
    return merged


def _check_default(key: str, value: object) -> object:
    if key not in BUILTIN_DEFAULTS:
        return value

    expected = type(BUILTIN_DEFAULTS[key])  # type: ignore[literal-required]
    try:
        if isinstance(value, str):
            value = _convert_value(key, value)
    except ValueError as e:
        raise ValueError(f"defaults.{key}: {e}") from e

    # bool is an int subclass, so compare exact types
    if type(value) is not expected:
        raise ValueError(f"defaults.{key} expects {expected.__name__}, got {value!r}")
    return value


def set_config_value(key: str, value: str) -> None:
    """Set a configuration value using dot notation.

    Examples:
        set_config_value("defaults.fetch_batch_size", "200")
        set_config_value("defaults.use_netrc", "false")

    Raises:
        ValueError: If value cannot be converted to expected type.
    """
    config = load_config(force_reload=True)

    parts = key.split(".")

    # Navigate to parent dict, creating intermediate dicts as needed
    current: dict = config
    for part in parts[:-1]:
        if part not in current:
            current[part] = {}
        current = current[part]

    final_key = parts[-1]
    current[final_key] = _convert_value(final_key, value)

    save_config(config)


def _convert_value(key: str, value: str) -> str | int | bool:
    """Convert string value to appropriate type based on field name.

    Raises:
        ValueError: If value cannot be converted to expected type.
    """
    int_fields = {"fetch_batch_size", "logout_timeout"}
    bool_fields = {"use_netrc"}

    if key in int_fields:
        return int(value)

    if key in bool_fields:
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"{key} expects true or false, got {value!r}")

    return value
