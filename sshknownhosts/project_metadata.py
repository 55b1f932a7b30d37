"""
Project-wide constants and default configuration locations.

Keep this module free of runtime logic.
"""

import os

PROJECT_NAME = "ssh-knownhosts"

COMMAND_NAME = "ssh-knownhosts"

MODULE_NAME = "sshknownhosts"
MODULE_CONFIG_PATH = "data/default.ini"

# searched in order, the first existing file is used
CONFIGFILE_PATH_LIST = [
    "/etc/sshknownhosts.ini",
    os.path.expanduser("~/.sshknownhosts.ini"),
]

CONFIG_ENV_VAR_NAME = "SSHKNOWNHOSTS_CONFIG"
