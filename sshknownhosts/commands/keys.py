import argparse

from rich import print as rich_print

from sshknownhosts.commands.base import KnownHostsCommand
from sshknownhosts.keys import fingerprint_sha256


class Keys(KnownHostsCommand):
    """lists the known keys of a host"""

    def register_arguments(self) -> None:
        super().register_arguments()
        self.parser.add_argument("host", type=str, help="host[:port] to look up")

    def execute(self, args: argparse.Namespace) -> None:
        host_keys = self.load_db(args).host_keys(args.host)
        if not host_keys:
            rich_print(f"[bold red]:cross_mark: {args.host} is unknown[/bold red]")
            return
        for host_key in host_keys:
            print(
                f"{host_key.filename}:{host_key.line}",
                "@cert-authority" if host_key.cert else "-",
                host_key.get_name(),
                host_key.key.get_bits(),
                fingerprint_sha256(host_key.key),
            )
