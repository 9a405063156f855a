"""Default configuration template.

This template is written to ~/.config/mailjson/config.toml
when running `mailjson config init`.
"""

CONFIG_TEMPLATE = """\
# mailjson configuration

[defaults]
# Where raw/, c/, mail.json and index.html are written
output_dir = "."

# Prefer credentials from ~/.netrc over the ones in the mailbox URL,
# so the password does not show up in the process list
use_netrc = true

# UIDs requested per FETCH round trip
fetch_batch_size = 100

# Seconds to wait for the server to acknowledge LOGOUT
logout_timeout = 30
"""
