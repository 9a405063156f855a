"""Path constants and directory utilities for mailjson config.

Follows the XDG Base Directory specification:
- Config: ~/.config/mailjson/
"""

from pathlib import Path


# XDG-compliant config directory
CONFIG_DIR = Path.home() / ".config" / "mailjson"
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Credentials lookup used when the mailbox URL carries no password
NETRC_FILE = Path.home() / ".netrc"


def ensure_config_dir() -> Path:
    """Create config directory if it doesn't exist.

    Returns the config directory path.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR
