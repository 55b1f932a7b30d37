import argparse
import sys

from rich import print as rich_print

from sshknownhosts.address import split_host_port
from sshknownhosts.client import SSHClient
from sshknownhosts.commands.base import KnownHostsCommand
from sshknownhosts.config import CONFIG_SECTION, CONFIGFILE
from sshknownhosts.exceptions import HostKeyChangedError
from sshknownhosts.verification import HostKeyStatus, HostKeyVerifier


class Check(KnownHostsCommand):
    """connects to a server and checks its host key"""

    def register_arguments(self) -> None:
        super().register_arguments()
        self.parser.add_argument("host", type=str, help="host[:port] to check")
        self.parser.add_argument(
            "--accept-new",
            dest="accept_new",
            action="store_true",
            default=CONFIGFILE.getboolean(CONFIG_SECTION, "accept-new", fallback=False),
            help="add unknown hosts to the first known_hosts file",
        )
        self.parser.add_argument(
            "--timeout",
            dest="timeout",
            type=float,
            default=CONFIGFILE.getfloat(CONFIG_SECTION, "timeout", fallback=10.0),
            help="timeout for the key exchange in seconds",
        )

    def execute(self, args: argparse.Namespace) -> None:
        try:
            host, port = split_host_port(args.host)
        except ValueError:
            host, port = args.host, "22"

        db = self.load_db(args)
        files = self.known_hosts_files(args)
        verifier = HostKeyVerifier(
            db.host_key_callback(),
            known_hosts_file=files[0] if files else None,
            accept_new=args.accept_new,
        )
        client = SSHClient(host, int(port), db, verifier, timeout=args.timeout)
        try:
            if not client.connect():
                sys.exit(1)
        except HostKeyChangedError as exc:
            rich_print(f"[bold red]:cross_mark: {exc}[/bold red]")
            sys.exit(2)
        finally:
            client.close()

        if client.result is not None and client.result.status is HostKeyStatus.UNKNOWN:
            rich_print(f"[bold yellow]:heavy_plus_sign: {args.host} added to {files[0]}[/bold yellow]")
        else:
            rich_print(f"[bold green]:heavy_check_mark: {args.host} is trusted[/bold green]")
