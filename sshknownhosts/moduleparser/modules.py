import argparse
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from sshknownhosts.moduleparser.parser import ModuleParser


class SubCommand(ABC):
    """
    Base class of the ``ssh-knownhosts`` subcommands.

    The first line of the class docstring is shown as help text. Arguments read
    their defaults from the config section named like the subcommand, unless
    :attr:`CONFIG_SECTION` is set.
    """

    CONFIG_SECTION: Optional[str] = None

    def __init__(
        self, name: str, subcommand: "argparse._SubParsersAction[ModuleParser]"
    ) -> None:
        self.name = name
        self.parser: "ModuleParser" = subcommand.add_parser(
            name,
            allow_abbrev=False,
            help=self.docs(),
            config_section=self.CONFIG_SECTION or name,
        )

    def register_arguments(self) -> None:  # noqa: B027
        """Add the arguments of the subcommand to :attr:`parser`."""

    @abstractmethod
    def execute(self, args: argparse.Namespace) -> None:
        """Run the subcommand."""

    @classmethod
    def docs(cls) -> Optional[str]:
        if not cls.__doc__:
            return None
        return cls.__doc__.strip().split("\n", maxsplit=1)[0]
