import argparse
import sys
from pathlib import Path

from sshknownhosts.address import split_host_port
from sshknownhosts.exceptions import KnownHostsFormatError
from sshknownhosts.keys import InvalidPublicKey, parse_authorized_key
from sshknownhosts.lines import write_known_host
from sshknownhosts.moduleparser import SubCommand


class Line(SubCommand):
    """prints the known_hosts line for a public key"""

    def register_arguments(self) -> None:
        self.parser.add_argument("host", type=str, help="host[:port] of the server")
        self.parser.add_argument(
            "--key-file",
            dest="key_file",
            required=True,
            help="public key file of the server, e.g. /etc/ssh/ssh_host_ed25519_key.pub",
        )
        self.parser.add_argument(
            "--remote",
            dest="remote",
            help="ip address and port of the server, added as second address",
        )

    def execute(self, args: argparse.Namespace) -> None:
        try:
            key_text = Path(args.key_file).expanduser().read_text(encoding="utf-8")
            key, _ = parse_authorized_key(key_text)
        except (OSError, InvalidPublicKey) as exc:
            sys.exit(str(exc))

        remote = None
        if args.remote:
            try:
                remote = split_host_port(args.remote)
            except ValueError as exc:
                sys.exit(str(exc))
        try:
            write_known_host(sys.stdout, args.host, remote, key)
        except KnownHostsFormatError as exc:
            sys.exit(str(exc))
