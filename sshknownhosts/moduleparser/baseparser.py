import argparse
import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from configparser import ConfigParser


class ConfigArgumentParser(argparse.ArgumentParser):
    """
    ArgumentParser which takes default values from a section of the config file.

    An option is looked up by its destination with underscores replaced by dashes,
    e.g. ``--accept-new`` (``dest="accept_new"``) reads ``accept-new``.
    """

    ARGCONF: Optional["ConfigParser"] = None

    def __init__(
        self,
        *args: Any,
        config: Optional["ConfigParser"] = None,
        config_section: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        if config is not None:
            ConfigArgumentParser.ARGCONF = config
        self.config_section = config_section
        super().__init__(*args, **kwargs)

    def config_option(self, args: Sequence[Any], kwargs: Any) -> Optional[str]:
        dest = kwargs.get("dest")
        if dest is None and args:
            dest = args[0].lstrip(self.prefix_chars)
        return dest.replace("_", "-") if dest else None

    def config_value(self, option: Optional[str]) -> Optional[str]:
        if not option or not self.config_section or self.ARGCONF is None:
            return None
        return self.ARGCONF.get(self.config_section, option, fallback=None) or None

    def add_argument(self, *args: Any, **kwargs: Any) -> argparse.Action:  # type: ignore[override]
        option = self.config_option(args, kwargs)
        value = self.config_value(option)
        if value is not None:
            action = kwargs.get("action", "store")
            if action in ("store", "store_const"):
                kwargs["default"] = value
            elif action in ("store_true", "store_false"):
                kwargs["default"] = self.ARGCONF.getboolean(  # type: ignore[union-attr]
                    self.config_section, option  # type: ignore[arg-type]
                )
            else:
                logging.debug(
                    "config value %s.%s ignored for %s arguments",
                    self.config_section,
                    option,
                    action,
                )
        return super().add_argument(*args, **kwargs)
