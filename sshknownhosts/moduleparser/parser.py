# Module `parser` shadows a Python standard-library module
"""
Command line parser which loads its subcommands from entry points.

Subcommands are registered in the ``sshknownhosts.SubCommand`` entry point group.
Default values of their arguments are read from the config section of the
subcommand.
"""

import argparse
from typing import TYPE_CHECKING, Any, Dict, Optional, Type, cast

import argcomplete

from sshknownhosts.compat import metadata
from sshknownhosts.moduleparser.baseparser import ConfigArgumentParser
from sshknownhosts.moduleparser.modules import SubCommand
from sshknownhosts.project_metadata import MODULE_NAME

if TYPE_CHECKING:
    from configparser import ConfigParser


class ModuleParser(ConfigArgumentParser):
    """
    Main parser class for the command line interface.
    """

    def __init__(
        self,
        *args: Any,
        config: Optional["ConfigParser"] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, config=config, **kwargs)
        self.subcommand: Optional["argparse._SubParsersAction[ModuleParser]"] = None
        self._registered_subcommands: Dict[str, SubCommand] = {}

    def load_subcommands(self) -> None:
        """
        Load and register subcommands from entry points.
        """
        for entry_point in metadata.entry_points(
            group=f"{MODULE_NAME}.{SubCommand.__name__}"
        ):
            if entry_point.name in self._registered_subcommands:
                continue
            subcommand_cls = cast("Type[SubCommand]", entry_point.load())
            self.register_subcommand(entry_point.name, subcommand_cls)

    def register_subcommand(self, name: str, subcommand_cls: Type[SubCommand]) -> SubCommand:
        if not self.subcommand:
            self.subcommand = self.add_subparsers(
                title="Available commands", dest="subparser_name", metavar="subcommand"
            )
            self.subcommand.required = True
        subcommand = subcommand_cls(name, self.subcommand)
        subcommand.register_arguments()
        self._registered_subcommands[name] = subcommand
        return subcommand

    def execute_subcommand(self, name: str, args: argparse.Namespace) -> None:
        """
        Execute a registered subcommand with the provided arguments.

        :param name: Name of the subcommand to execute.
        :param args: Parsed arguments to pass to the subcommand.
        """
        self._registered_subcommands[name].execute(args)

    def parse_args(  # type: ignore[override]
        self,
        args: Optional[Any] = None,
        namespace: Optional[argparse.Namespace] = None,
    ) -> argparse.Namespace:
        argcomplete.autocomplete(self)
        return super().parse_args(args, namespace)
