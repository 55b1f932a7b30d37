import argparse

from sshknownhosts.commands.base import KnownHostsCommand


class Algorithms(KnownHostsCommand):
    """prints the host key algorithms of a known host"""

    def register_arguments(self) -> None:
        super().register_arguments()
        self.parser.add_argument("host", type=str, help="host[:port] to look up")

    def execute(self, args: argparse.Namespace) -> None:
        for algorithm in self.load_db(args).host_key_algorithms(args.host):
            print(algorithm)
