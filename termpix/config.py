"""Define a configuration class for termpix."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from ast import literal_eval
from pathlib import Path
from typing import TYPE_CHECKING, cast

import fastjsonschema
from platformdirs import user_config_dir
from upath import UPath

from termpix import __app_name__, __copyright__

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from typing import Any, ClassVar, TextIO

    from _typeshed import SupportsWrite


log = logging.getLogger(__name__)

_SCHEMA_TYPES: dict[type | Callable, str] = {
    bool: "boolean",
    str: "string",
    int: "integer",
    float: "number",
    UPath: "string",
}


class ArgumentParser(argparse.ArgumentParser):
    """An argument parser which lexes and formats help messages before printing."""

    def _print_message(
        self, message: str, file: SupportsWrite[str] | None = None
    ) -> None:
        from prompt_toolkit.formatted_text import PygmentsTokens
        from prompt_toolkit.shortcuts.utils import print_formatted_text
        from prompt_toolkit.styles.pygments import style_from_pygments_cls

        from termpix.pygments import ArgparseLexer, TermpixPygmentsStyle

        if message:
            file = cast("TextIO | None", file)
            print_formatted_text(
                PygmentsTokens(ArgparseLexer().get_tokens(message.rstrip("\n"))),
                file=file,
                style=style_from_pygments_cls(TermpixPygmentsStyle),
                include_default_pygments_style=False,
            )


class JSONEncoderPlus(json.JSONEncoder):
    """JSON encode class which encodes paths as strings."""

    def default(self, o: Any) -> bool | int | float | str | None:
        """Encode an object to JSON.

        Args:
            o: The object to encode

        Returns:
            The encoded object

        """
        if isinstance(o, (Path, UPath)):
            return str(o)
        return json.JSONEncoder.default(self, o)


_json_encoder = JSONEncoderPlus()


class Setting:
    """A single configuration item."""

    def __init__(
        self,
        name: str,
        group: str,
        default: Any = None,
        help_: str = "",
        description: str = "",
        type_: Callable[[Any], Any] | None = None,
        title: str | None = None,
        choices: list[Any] | None = None,
        action: type[argparse.Action] | str | None = None,
        flags: list[str] | None = None,
        schema: dict[str, Any] | None = None,
        nargs: str | int | None = None,
        hidden: bool = False,
        **kwargs: Any,
    ) -> None:
        """Create a new configuration item."""
        self.name = name
        self.group = group
        self.default = default
        self.title = title or self.name.replace("_", " ")
        self.help = help_
        self.description = description
        self.choices = choices
        self.type = type_ or type(default)
        self.action = action or (
            argparse.BooleanOptionalAction if self.type is bool else None
        )
        self.flags = flags or [f"--{name.replace('_', '-')}"]
        self._schema: dict[str, Any] = {
            "type": _SCHEMA_TYPES.get(self.type),
            **(schema or {}),
        }
        self.nargs = nargs
        self.hidden = hidden
        self.kwargs = kwargs

    @property
    def schema(self) -> dict[str, Any]:
        """Return a json schema property for the config item."""
        schema = {
            "description": self.help,
            **({"default": self.default} if self.default is not None else {}),
            **self._schema,
        }
        if self.choices:
            schema["enum"] = self.choices
        return schema

    @property
    def parser_args(self) -> tuple[list[str], dict[str, Any]]:
        """Return arguments for construction of an :class:`argparse.ArgumentParser`."""
        args = self.flags

        kwargs: dict[str, Any] = {
            "action": self.action,
            "help": argparse.SUPPRESS if self.hidden else self.help,
            # Do not set defaults for command line arguments, as default values
            # would override values set in the configuration file
        }

        if self.nargs:
            kwargs["nargs"] = self.nargs
        if self.type is not None and self.action not in (
            "version",
            argparse.BooleanOptionalAction,
        ):
            kwargs["type"] = self.type
        if self.choices:
            kwargs["choices"] = self.choices
        if "version" in self.kwargs:
            kwargs["version"] = self.kwargs["version"]

        return args, kwargs

    def __repr__(self) -> str:
        """Represent a :py:class`Setting` instance as a string."""
        return f"<Setting {self.name}: {self.type}>"


class Config:
    """A configuration store.

    Values are loaded from (in increasing order of priority) the settings' defaults,
    the user's configuration file, environment variables, and command line arguments.
    """

    _conf_file_name = "config.json"
    _settings: ClassVar[dict[str, Setting]] = {}

    def __init__(self, _help: str = "", **kwargs: Any) -> None:
        """Create a new configuration object instance.

        Args:
            _help: The description shown in the command line help message
            kwargs: Initial values for settings

        """
        self._help = _help
        self._config_file_path = (
            Path(user_config_dir(__app_name__, appauthor=None)) / self._conf_file_name
        )
        self._schema_validate = fastjsonschema.compile(self._schema, use_default=False)
        self._values = {
            # Setting defaults
            **{k: v.default for k, v in self._settings.items()},
            # Key-word arguments
            **kwargs,
        }

    def load(self, args: Sequence[str] | None = None) -> None:
        """Load the configuration options from non-local sources.

        Args:
            args: The command line arguments to parse. Defaults to :py:data:`sys.argv`

        """
        from termpix.log import BufferedLogs, setup_logs

        # Buffer logs and replay them after logging is configured
        with BufferedLogs(logger=log):
            try:
                self._values.update(self._validate(self._load_user(), "config file"))
                self._values.update(
                    self._validate(self._load_env(), "environment variable")
                )
                self._values.update(
                    self._validate(self._load_args(args), "command line parameter")
                )
            finally:
                # Set-up logs even if configuration validation fails
                setup_logs(self)

    def _validate(self, data: dict[str, Any], group: str) -> dict[str, Any]:
        """Validate settings values."""
        validated = {}
        for name, value in data.items():
            if name in self._settings:
                # Convert to json and back to attain json types
                json_data = json.loads(_json_encoder.encode({name: value}))
                try:
                    self._schema_validate(json_data)
                except fastjsonschema.JsonSchemaValueException as error:
                    # Warn about badly configured settings
                    log.warning(
                        "Error in %s setting: `%s = %r`\n%s",
                        group,
                        name,
                        value,
                        error.message.replace("data.", ""),
                    )
                else:
                    validated[name] = value
            else:
                log.warning(
                    "Configuration option '%s' not recognised in %s", name, group
                )
        return validated

    @property
    def _schema(self) -> dict[str, Any]:
        """Return a JSON schema for the config."""
        return {
            "title": "Termpix Configuration",
            "description": "A configuration for termpix",
            "type": "object",
            "properties": {name: item.schema for name, item in self._settings.items()},
        }

    @property
    def settings(self) -> dict[str, Setting]:
        """Return the settings belonging to loaded modules."""
        return {
            name: setting
            for name, setting in self._settings.items()
            if setting.group in sys.modules
        }

    def _load_parser(self) -> argparse.ArgumentParser:
        """Construct an :py:class:`ArgumentParser`."""
        parser = ArgumentParser(
            prog=__app_name__,
            description=self._help,
            epilog=__copyright__,
            allow_abbrev=True,
            formatter_class=argparse.MetavarTypeHelpFormatter,
            argument_default=argparse.SUPPRESS,
        )
        for setting in self.settings.values():
            args, kwargs = setting.parser_args
            parser.add_argument(*args, **kwargs)
        return parser

    def _load_args(self, args: Sequence[str] | None = None) -> dict[str, Any]:
        """Attempt to load configuration settings from commandline flags."""
        namespace, remainder = self._load_parser().parse_known_intermixed_args(args)
        if remainder:
            log.warning("Unrecognised command line arguments: %s", " ".join(remainder))
        return vars(namespace)

    def _load_env(self) -> dict[str, Any]:
        """Attempt to load configuration settings from environment variables."""
        result = {}
        for name, setting in self._settings.items():
            env = f"{__app_name__}_{setting.name}".upper()
            if env in os.environ:
                value = os.environ.get(env)
                parsed_value: Any = value
                # Attempt to parse the value as a literal
                if value:
                    try:
                        parsed_value = literal_eval(value)
                    except (
                        ValueError,
                        TypeError,
                        SyntaxError,
                        MemoryError,
                        RecursionError,
                    ):
                        pass
                result[name] = parsed_value
        return result

    def _load_config_file(self) -> dict[str, Any]:
        """Attempt to load JSON configuration file."""
        results = {}
        if self._config_file_path.exists():
            with self._config_file_path.open() as f:
                try:
                    json_data = json.load(f)
                except json.decoder.JSONDecodeError:
                    log.error(
                        "Could not parse the configuration file: %s\nIs it valid json?",
                        self._config_file_path,
                    )
                else:
                    results.update(json_data)
        return results

    def _load_user(self) -> dict[str, Any]:
        """Load settings from the user's configuration file."""
        results = {}
        for name, value in self._load_config_file().items():
            if (setting := self._settings.get(name)) is not None and not isinstance(
                value, list
            ):
                # Attempt to cast the value to the desired type
                try:
                    value = setting.type(value)
                except (ValueError, TypeError):
                    pass
            results[name] = value
        return results

    def __getattr__(self, name: str) -> Any:
        """Enable access of config elements via dotted attributes."""
        if name != "_values" and name in self._values:
            return self._values[name]
        raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        """Set a configuration attribute."""
        if name in self._settings:
            self._values[name] = value
        else:
            super().__setattr__(name, value)

    @classmethod
    def add_setting(cls, name: str, *args: Any, **kwargs: Any) -> None:
        """Register a new config item."""
        Config._settings[name] = Setting(name, *args, **kwargs)


add_setting = Config.add_setting
