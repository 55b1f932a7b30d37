import os
from configparser import ConfigParser
from typing import List

from sshknownhosts.compat import resources
from sshknownhosts.project_metadata import (
    CONFIG_ENV_VAR_NAME,
    CONFIGFILE_PATH_LIST,
    MODULE_CONFIG_PATH,
    MODULE_NAME,
)

CONFIG_SECTION = "KnownHosts"


def load_config() -> ConfigParser:
    config = ConfigParser()

    # read default config
    conf = resources.files(MODULE_NAME) / MODULE_CONFIG_PATH
    config.read_string(conf.read_text())

    # check if a production or user config exists and read it
    for configpath in CONFIGFILE_PATH_LIST:
        if os.path.isfile(configpath):
            config.read(configpath)
            break

    config_env = os.environ.get(CONFIG_ENV_VAR_NAME)
    if config_env and os.path.isfile(config_env):
        config.read(config_env)
    return config


def known_hosts_files(config: ConfigParser) -> List[str]:
    """Return the configured known_hosts files with ``~`` expanded."""
    return [
        os.path.expanduser(path)
        for path in config.get(CONFIG_SECTION, "known-hosts-files", fallback="").split()
    ]


CONFIGFILE = load_config()
