"""
Command line parser with config file defaults and entry point subcommands.
"""

from sshknownhosts.moduleparser.modules import SubCommand
from sshknownhosts.moduleparser.parser import ModuleParser

__all__ = [
    "ModuleParser",
    "SubCommand",
]
