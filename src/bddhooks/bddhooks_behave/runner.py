"""Runner executing the features once per configured browser."""

import glob
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from behave.exception import ConfigError
from behave.formatter._registry import make_formatters as behave_make_formatters
from behave.formatter.base import StreamOpener
from behave.model_type import FileLocation as BehaveFileLocation
from behave.pathutil import select_subdirectories
from behave.runner import Context, ModelRunner, parse_features
from behave.runner_util import exec_file, load_step_modules, reset_runtime

from ..constants import BROWSER_PROPERTY
from ..utils import ThreadProperty
from .configuration import Configuration
from .wrapper import DeferredFormatter, DeferredOutput

__all__ = ["BrowserMatrixRunner"]

ResolvedPath = Tuple[str, Path, Optional[int]]


def resolve_path(path: str, features_path: Path) -> Iterator[ResolvedPath]:
    """Resolves one command line path against the features directory.

    Args:
        path (str): A file or directory, optionally suffixed with ':LINE', and possibly
                    a glob pattern (e.g., 'web/login.feature:10' or 'stores/*.feature').
        features_path (Path): Base of relative paths.

    Yields:
        ResolvedPath: (path as given, absolute path, line number or None)

    Raises:
        ConfigError: If the line suffix is not a number.
    """
    name, separator, line = path.partition(":")
    if separator and not line.isdigit():
        raise ConfigError(f"Invalid location {path!r}: line number {line!r} must be a positive integer.")
    line_number = int(line) if separator else None

    target = Path(name)
    if not glob.has_magic(name):
        yield path, (features_path / target).absolute(), line_number
        return

    if target.is_absolute():
        matches = Path(target.anchor).glob(str(target.relative_to(target.anchor)))
    else:
        matches = features_path.glob(name)
    for match in matches:
        yield path, match.absolute(), line_number


def expand_paths(paths: Iterable[str], features_path: Path) -> Iterator[ResolvedPath]:
    """Resolves every path; '@FILE' entries are replaced by the paths listed in FILE.

    Empty lines and '#' comments of an @file are ignored.

    Raises:
        FileNotFoundError: If an @file does not exist.
    """
    for path in paths:
        if not path.startswith("@"):
            yield from resolve_path(path, features_path)
            continue

        listing = Path(path[1:])
        if not listing.is_file():
            raise FileNotFoundError(f"Config file not found: {str(listing)!r}")

        for entry in listing.read_text(encoding="utf-8").splitlines():
            entry = entry.strip()
            if entry and not entry.startswith("#"):
                yield from resolve_path(entry, features_path)


class FileLocation(BehaveFileLocation):
    """Hashable behave FileLocation, so duplicates collapse in a set."""

    def __hash__(self) -> int:
        return hash((self.filename, self.line))


def find_features(path: Path, line_number: Optional[int]) -> List[FileLocation]:
    """Feature files at `path`: the file itself, or every '*.feature' below a directory."""
    if path.is_dir():
        return [FileLocation(str(feature), line_number) for feature in sorted(path.rglob("*.feature"))]
    if path.suffix == ".feature" and path.is_file():
        return [FileLocation(str(path), line_number)]
    return []


def make_formatters(config: Configuration, stream_openers: StreamOpener) -> List[DeferredFormatter]:
    """Build the wrapped formatters, so their streams survive between browser passes."""
    return [DeferredFormatter(formatter) for formatter in behave_make_formatters(config, stream_openers)]


class BrowserMatrixRunner(ModelRunner):
    """
    A custom runner extending Behave's ModelRunner. The environment hooks and the
    step definitions are loaded once from the features directory; the features
    are then parsed and run once for every configured browser, with the browser
    stored in the 'browser' thread property for the '@web' hook.
    """

    config: Configuration

    def __init__(self, config: Configuration):
        super().__init__(config)

        # Features are parsed again for every pass in run().
        self.features = []
        self.original_paths: List[str] = []
        self.feature_locations: List[FileLocation] = []

    def load_hooks(self, features_path: Path) -> None:
        self.hooks = {}
        hooks_path: Path = features_path / self.config.environment_file
        if hooks_path.is_file():
            exec_file(str(hooks_path), self.hooks)

    def load_step_definitions(self, features_path: Path) -> None:
        steps_dir: Path = features_path / self.config.steps_dir

        step_paths = [str(steps_dir)]
        if self.config.use_nested_step_modules:
            step_paths.extend(select_subdirectories(str(steps_dir)))

        reset_runtime()
        load_step_modules(step_paths)

    def collect_feature_locations(self) -> List[FileLocation]:
        """Collects the feature files selected by the configured paths (all features when none).

        Paths that do not exist or hold no feature files are skipped.

        Returns:
            List[FileLocation]: Sorted locations without duplicates.

        Raises:
            ConfigError: If a path lies outside the features directory.
        """
        verbose = self.config.verbose
        features_path = Path(self.config.features_directory).absolute()
        paths = self.config.paths or ["*"]
        if verbose:
            print("Selected paths:", ", ".join(repr(path) for path in paths))

        locations: Set[FileLocation] = set()
        for path, resolved_path, line_number in expand_paths(paths, features_path):
            if not resolved_path.exists():
                if verbose:
                    print(f"Skipping {path!r}: {str(resolved_path)!r} does not exist.")
                continue

            if features_path != resolved_path and features_path not in resolved_path.parents:
                raise ConfigError(
                    f"Path {str(resolved_path)!r} is not inside the features directory: {str(features_path)!r}"
                )

            found = [
                location
                for location in find_features(resolved_path, line_number)
                if not self.config.exclude(location.filename)
            ]
            if not found and verbose:
                print(f"Skipping {path!r}: no feature files in {str(resolved_path)!r}.")
            locations.update(found)

        return sorted(locations)

    def iter_browsers(self) -> Iterator[str]:
        """Yields the browsers to run; a single empty browser when none is configured."""
        if not self.config.browsers:
            yield ""
            return
        yield from self.config.browsers

    def setup(self) -> None:
        """Selects the features and loads the hooks, the steps and the formatters once for all passes.

        Raises:
            ConfigError: If no feature file is selected.
        """
        self.original_paths = list(self.config.paths)
        self.feature_locations = self.collect_feature_locations()
        if not self.feature_locations:
            raise ConfigError("No feature files found.")

        features_path = Path(self.config.features_directory).absolute()
        # behave resolves relative names (e.g., in reports) against the first path
        self.config.base_dir = str(features_path)
        self.config.paths = [self.config.base_dir]

        self.load_hooks(features_path)
        self.load_step_definitions(features_path)

        self.context = Context(self)
        self.config.setup_logging()
        self.formatters = make_formatters(self.config, self.config.outputs)

    def finish(self) -> None:
        """Closes the formatters and reporters held open across the passes."""
        outputs = list(self.formatters) + list(self.config.reporters)
        for output in outputs:
            if isinstance(output, DeferredOutput):
                output.release()

        ThreadProperty.remove(BROWSER_PROPERTY)
        self.config.paths = self.original_paths

    def run(self) -> int:
        """Runs all features once per browser.

        A failing pass fails the run; with --stop the remaining browsers are skipped.

        Returns:
            int: Status code (0=success or 1=failure).
        """
        self.setup()

        failed = False
        for browser in self.iter_browsers():
            if self.run_browser(browser):
                failed = True
                if self.config.stop:
                    break
            if self.aborted:
                break

        self.finish()
        return int(failed)

    def run_browser(self, browser: str) -> int:
        """Parses and runs every selected feature with `browser` as the browser under test.

        Args:
            browser (str): Browser as NAME_VERSION, or empty when no browser is configured.

        Returns:
            int: Status code (0=success or 1=failure).
        """
        if self.config.verbose and browser:
            print(f"Running features with browser {browser!r}")

        ThreadProperty.set(BROWSER_PROPERTY, browser)

        # Parsed per pass: behave keeps the run status on the model objects
        features = parse_features(self.feature_locations, language=self.config.lang)
        return int(bool(self.run_model(features)))
