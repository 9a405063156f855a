"""Configuration schema definitions.

Uses TypedDict for type safety without runtime overhead.
These types match the structure of config.toml.
"""

from typing import TypedDict


class DefaultsConfig(TypedDict, total=False):
    """Default settings applied to every archive run.

    Attributes:
        output_dir: Directory receiving raw/, c/, mail.json and index.html.
        use_netrc: Look up credentials in ~/.netrc for the mail host.
        fetch_batch_size: Number of UIDs requested per FETCH command.
        logout_timeout: Seconds to wait for the server on LOGOUT.
    """

    output_dir: str
    use_netrc: bool
    fetch_batch_size: int
    logout_timeout: int


class MailjsonConfig(TypedDict, total=False):
    """Root configuration structure."""

    defaults: DefaultsConfig
