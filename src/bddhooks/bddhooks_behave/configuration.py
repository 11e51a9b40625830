import argparse
import logging
import os
import shlex
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from behave.configuration import COLOR_CHOICES
from behave.configuration import OPTIONS as BEHAVE_OPTIONS
from behave.configuration import Configuration as BehaveConfiguration
from behave.exception import ConfigError
from behave.reporter.base import Reporter
from behave.userdata import parse_user_define
from dotenv import dotenv_values

from ..constants import (
    DEFAULT_FEATURES_PATH,
    DEFAULT_RUNNER,
    ENV_EXCLUDED_OPTIONS,
    ENV_PREFIX,
    ENV_SEQUENCE_OPTIONS,
    OPTIONS,
    USER_CONFIG,
)
from ..settings import connection_values
from ..types import CommandArgs, ConnectionValues, DefaultValues, Options, override
from .wrapper import DeferredReporter

__all__ = ["Configuration"]


def iter_config_files(cli_file: Optional[Path] = None) -> Iterator[Tuple[str, Optional[Path], str]]:
    """Yields (label, path, reason) for every dotenv source, lowest precedence first.

    `path` is None when the source is not used; `reason` then says why.
    """
    user_config_file = Path.home() / USER_CONFIG
    if user_config_file.exists():
        yield "user", user_config_file, ""
    else:
        yield "user", None, "User config file not found."

    # A project '.env' only exists in a source checkout
    if os.environ.get("_BDDHOOKS_SOURCE") != "true":
        yield "project", None, "Loading project config file is omitted in production mode."
    else:
        project_config_file = Path(__file__).absolute().parents[3] / ".env"
        if project_config_file.exists():
            yield "project", project_config_file, ""
        else:
            yield "project", None, "Project config file not found."

    if cli_file is None:
        yield "CLI", None, "CLI config file was not specified."
    elif not cli_file.exists():
        raise FileNotFoundError(f"The --config file not found at {str(cli_file)!r}.")
    else:
        yield "CLI", cli_file, ""


def build_environment_values(cli_file: Optional[Path] = None, verbose: Optional[bool] = None) -> Dict[str, str]:
    """Merges the process environment with the dotenv config files.

    Later sources win: OS environment, then ~/.bddhooks, then the project '.env'
    (source checkouts only), then the file given with --config.

    Args:
        cli_file: Path given with --config, if any.
        verbose: If True, prints which files are loaded or skipped.

    Returns:
        Dict[str, str]: The merged key-value pairs.

    Raises:
        FileNotFoundError: If the --config file does not exist.
    """
    merged: Dict[str, Optional[str]] = dict(os.environ)

    for label, path, reason in iter_config_files(cli_file):
        if path is None:
            if verbose:
                print(f"Skipping: {reason}")
            continue

        if verbose:
            print(f"Load {label} config file.")
        merged.update(dotenv_values(path))

    # dotenv yields None for keys declared without a value
    return {key: value for key, value in merged.items() if value is not None}


def parse_env_value(config_name: str, value: str) -> Any:
    """Converts a stripped environment value to the type the option expects.

    'true'/'false' become booleans and digits become integers. Sequence options
    are shell-split, so quoted elements stay together; user defines are further
    split into (name, value) pairs.
    """
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isnumeric():
        return int(value)
    if config_name not in ENV_SEQUENCE_OPTIONS:
        return value

    elements = shlex.split(value)
    if config_name == "userdata_defines":
        return [parse_user_define(element) for element in elements]
    return elements


def load_environment_settings(defaults: DefaultValues, env_values: Dict[str, str], verbose: Optional[bool] = None) -> None:
    """Copies the BDDHOOKS_-prefixed variables into the defaults, keyed by option name.

    Args:
        defaults: Option defaults, updated in place.
        env_values: Merged environment (see build_environment_values).
        verbose: If True, prints every loaded or skipped variable.

    Raises:
        ConfigError: If a variable names an option listed in ENV_EXCLUDED_OPTIONS.
    """
    for env_var, raw_value in env_values.items():
        name = env_var.lower()
        if not name.startswith(ENV_PREFIX):
            continue

        config_name = name[len(ENV_PREFIX) :]
        if not config_name:
            if verbose:
                print(f"Skipping ENV[{env_var}]: Configuration name is empty after stripping prefix ('BDDHOOKS_').")
            continue

        if config_name in ENV_EXCLUDED_OPTIONS:
            raise ConfigError(f"ENV[{env_var}]: Setting {config_name!r} cannot be specified as environment var.")

        value = raw_value.strip()
        if not value:
            if verbose:
                print(f"Skipping ENV[{env_var}]: Value is empty or whitespace.")
            continue

        defaults[config_name] = parse_env_value(config_name, value)
        if verbose:
            print(f"{config_name:<15} = {defaults[config_name]!r} (ENV[{env_var}] = {raw_value!r})")


def iter_behave_options(behave_options: Options) -> Iterator[Options]:
    """Yields behave's options that can be added to the bddhooks parser.

    Options whose flags clash with a bddhooks flag are dropped, as are
    positional entries (no flags). The 'config_help' keyword is removed since
    argparse does not know it.
    """
    own_flags = {flag for flags, _ in OPTIONS for flag in flags}

    # Format: see `behave.configuration.OPTIONS`
    for flags, keywords in behave_options:
        if not flags or own_flags.intersection(flags):
            continue

        yield (flags, {key: value for key, value in keywords.items() if key != "config_help"})


def setup_main_parser() -> argparse.ArgumentParser:
    """Parser holding the bddhooks options followed by every behave option.

    Used to validate the full command line and to render --help.
    """
    description = """Run feature tests with %(prog)s, once per browser.

EXAMPLES:
  %(prog)s
  %(prog)s --browser chrome_120 --browser firefox_115
  %(prog)s --selenium-grid grid.local:4444 -b chrome_120 web
  %(prog)s --tags @MongoDB stores/mongo.feature
  %(prog)s --features-dir acceptance stores/cassandra.feature:10
"""
    parser = argparse.ArgumentParser(
        prog="bddhooks",
        usage="%(prog)s [-b BROWSER ...] [options] [paths ...]",
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    for flags, keywords in list(OPTIONS) + list(iter_behave_options(BEHAVE_OPTIONS)):
        parser.add_argument(*flags, **keywords)

    parser.add_argument(
        "paths",
        nargs="*",
        help="Feature directories, files, FILE:LINE locations or @files, relative to the features directory. "
        "All features run when omitted.",
    )

    return parser


class Configuration(BehaveConfiguration):
    """
    behave Configuration extended with the browser matrix, the Selenium Grid
    address, the features directory and the data store connection settings.

    Sources, lowest precedence first: class defaults, keyword arguments,
    BDDHOOKS_* variables (from the environment and the dotenv files), behave
    config files, then the command line.
    """

    defaults: DefaultValues = {
        **BehaveConfiguration.defaults,
        "runner": DEFAULT_RUNNER,
        "logging_level": logging.ERROR,
    }

    bddhooks_defaults: DefaultValues = {
        "features_directory": DEFAULT_FEATURES_PATH,
        "browsers": None,
        "selenium_grid": None,
    }

    # Absolute features directory, filled in by BrowserMatrixRunner.setup()
    base_dir: str = ""

    @override
    def __init__(
        self,
        command_args: Optional[CommandArgs] = None,
        load_config: bool = True,
        verbose: Optional[bool] = None,
        **kwargs: DefaultValues,
    ):
        """
        Args:
            command_args (CommandArgs): Command line without the program name (defaults to sys.argv[1:]).
            load_config (bool): Whether behave reads its own config files (behave.ini, setup.cfg, ...).
            verbose (Optional[bool]): Forces verbosity; otherwise taken from -v/--verbose.
        """
        command_args = self.make_command_args(command_args, verbose)
        cli_config, verbose = self.auto_discover(command_args, verbose)

        defaults = Configuration.make_defaults(**kwargs)
        env_values = build_environment_values(cli_config, verbose)
        load_environment_settings(defaults, env_values, verbose)

        # Full parser first, so that unknown options and --help are handled for both option sets
        parser = setup_main_parser()
        parser.set_defaults(**defaults)
        parser.parse_args(command_args)

        own_args, behave_command_args = Configuration.parse_bddhooks_args(command_args, **defaults)
        super(Configuration, self).__init__(
            command_args=behave_command_args, load_config=load_config, verbose=verbose, **defaults
        )
        for key, value in vars(own_args).items():
            if not key.startswith("_"):
                setattr(self, key, value)

        self.setup_features_directory()
        self.setup_browsers(parser)
        self.setup_connection_values(env_values)
        self.wrap_reporters()

    @override
    def init(self, verbose: Optional[bool] = None, **kwargs: DefaultValues):
        """Declares the bddhooks attributes next to behave's own."""
        super(Configuration, self).init(verbose=verbose, **kwargs)

        self.lang: str = "en"

        self.features_directory: Union[str, Path] = Path()
        self.browsers: Optional[List[str]] = None
        self.selenium_grid: Optional[str] = None
        self.connection_values: ConnectionValues = {}

    @override
    @classmethod
    def make_defaults(cls, **kwargs):
        return super().make_defaults(**{**cls.bddhooks_defaults, **kwargs})

    @override
    def make_command_args(self, command_args: Optional[CommandArgs] = None, verbose: Optional[bool] = None):
        if command_args is None:
            command_args = sys.argv[1:]

        # behave treats the argument after a bare '--color' as its value unless it
        # is an existing path. Feature paths are relative to the features directory,
        # so 'bddhooks --color web/login.feature' would lose its path: insert 'auto'.
        if "--color" in command_args:
            position = command_args.index("--color") + 1
            if position >= len(command_args) or command_args[position] not in COLOR_CHOICES:
                command_args.insert(position, "auto")

        return super(Configuration, self).make_command_args(command_args=command_args, verbose=verbose)

    def auto_discover(
        self, command_args: Optional[CommandArgs] = None, verbose: Optional[bool] = None
    ) -> Tuple[Optional[Path], bool]:
        """Finds the --config file and the verbosity before the real parsing happens."""
        command_args = command_args or []

        cli_config = None
        if "--config" in command_args:
            position = command_args.index("--config") + 1
            if position < len(command_args):
                cli_config = Path(command_args[position])

        if verbose is None:
            verbose = "-v" in command_args or "--verbose" in command_args

        return cli_config, verbose

    @classmethod
    def parse_bddhooks_args(
        cls, command_args: CommandArgs, **kwargs: DefaultValues
    ) -> Tuple[argparse.Namespace, CommandArgs]:
        """Splits the command line into the bddhooks options and the rest.

        Args:
            command_args: The command line.
            **kwargs: Resolved defaults; only the bddhooks keys are used.

        Returns:
            Tuple[argparse.Namespace, CommandArgs]: The bddhooks options (see OPTIONS)
            and the remaining arguments, handed to behave.
        """
        # No -h here: --help is handled by the full parser
        parser = argparse.ArgumentParser(add_help=False)
        appended = set()
        for flags, keywords in OPTIONS:
            parser.add_argument(*flags, **keywords)
            if keywords.get("action") == "append":
                appended.add(keywords["dest"])

        # argparse appends to the default of an "append" option: the command line replaces it instead
        own_defaults = {key: kwargs.get(key, value) for key, value in cls.bddhooks_defaults.items()}
        parser.set_defaults(**{key: None if key in appended else value for key, value in own_defaults.items()})

        own_args, remaining_args = parser.parse_known_args(command_args)
        for key in appended:
            if getattr(own_args, key) is None:
                default = own_defaults.get(key)
                setattr(own_args, key, list(default) if isinstance(default, list) else default)
        return own_args, remaining_args

    def setup_features_directory(self):
        """Makes the features directory absolute; it must exist unless a utility option was given."""
        is_utility_mode = any(
            [
                self.version,
                self.tags_help,
                self.lang == "help",
                self.lang_list,
                self.lang_help,
                isinstance(self.format, list) and "help" in self.format,
            ]
        )

        self.features_directory = Path(self.features_directory).absolute()

        if not self.features_directory.is_dir() and not is_utility_mode:
            raise ConfigError(f"Features directory not found: {str(self.features_directory)!r}")

    def setup_browsers(self, parser: argparse.ArgumentParser):
        if isinstance(self.browsers, str):
            self.browsers = shlex.split(self.browsers)

        browsers = []
        for browser in self.browsers or []:
            browser = browser.strip()
            if not browser:
                parser.error("An empty browser name was given.")
            if browser not in browsers:
                browsers.append(browser)
        self.browsers = browsers

    def setup_connection_values(self, env_values: Dict[str, str]):
        """Collects the connection settings to export while the features run."""
        self.connection_values = connection_values(env_values)
        if self.selenium_grid:
            self.connection_values["SELENIUM_GRID"] = self.selenium_grid

    def wrap_reporters(self):
        self.reporters = [DeferredReporter(reporter) for reporter in self.reporters if isinstance(reporter, Reporter)]
