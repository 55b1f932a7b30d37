"""
Command line interface of ssh-knownhosts.

The subcommands are loaded from the ``sshknownhosts.SubCommand`` entry point group:

* ``keys`` lists the known keys of a host
* ``algorithms`` prints the host key algorithms to offer for a host
* ``check`` connects to a server and verifies its host key
* ``line`` prints a known_hosts line for a public key

Global options:

* -V, --version: prints the version
* -d, --debug: more verbose output
* --paramiko-log-level: log level of the paramiko library
* --log-format: text or json
"""

import logging
import sys
from typing import Optional, Sequence

from sshknownhosts.__version__ import version
from sshknownhosts.config import CONFIGFILE
from sshknownhosts.logger import setup_logging
from sshknownhosts.moduleparser import ModuleParser
from sshknownhosts.project_metadata import COMMAND_NAME


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = ModuleParser(
        config=CONFIGFILE,
        prog=COMMAND_NAME,
        description="known_hosts lookups and host key verification",
        allow_abbrev=False,
        config_section="KnownHosts",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"{COMMAND_NAME} {version}"
    )
    parser.add_argument(
        "-d",
        "--debug",
        dest="debug",
        action="store_true",
        help="More verbose output of status information",
    )
    parser.add_argument(
        "--paramiko-log-level",
        dest="paramiko_log_level",
        choices=["warning", "info", "debug"],
        help="set paramikos log level",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=["text", "json"],
        help="defines the log output format",
    )
    parser.load_subcommands()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug, log_format=args.log_format or "text")

    if args.paramiko_log_level == "debug":
        logging.getLogger("paramiko").setLevel(logging.DEBUG)
    elif args.paramiko_log_level == "info":
        logging.getLogger("paramiko").setLevel(logging.INFO)
    else:
        logging.getLogger("paramiko").setLevel(logging.WARNING)

    try:
        parser.execute_subcommand(args.subparser_name, args)
    except (AttributeError, KeyError):
        logging.exception("can not run subcommand - invalid subcommand name")
        sys.exit(1)


if __name__ == "__main__":
    main()
