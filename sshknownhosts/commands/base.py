import argparse
import sys
from typing import List

from sshknownhosts.config import CONFIGFILE, known_hosts_files
from sshknownhosts.db import HostKeyDB
from sshknownhosts.exceptions import KnownHostsError
from sshknownhosts.moduleparser import SubCommand


class KnownHostsCommand(SubCommand):
    """base class for commands which read known_hosts files"""

    def register_arguments(self) -> None:
        self.parser.add_argument(
            "--known-hosts",
            dest="known_hosts",
            action="append",
            help="known_hosts file, may be given multiple times (default: from config)",
        )

    @staticmethod
    def known_hosts_files(args: argparse.Namespace) -> List[str]:
        return args.known_hosts or known_hosts_files(CONFIGFILE)

    def load_db(self, args: argparse.Namespace) -> HostKeyDB:
        try:
            return HostKeyDB.load(*self.known_hosts_files(args))
        except (KnownHostsError, OSError) as exc:
            sys.exit(str(exc))
