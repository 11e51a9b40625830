import os
import sys
import traceback
from contextlib import contextmanager
from typing import Dict, Generator, Optional

from behave import __version__ as behave_version
from behave.__main__ import run_behave
from behave.exception import ConfigError, NotSupportedWarning, TagExpressionError

from .bddhooks_behave.configuration import Configuration
from .constants import VERSION
from .exceptions import HookError

__all__ = ["main", "run_bddhooks"]


def handle_utility_functions(config: Configuration) -> Optional[int]:
    """
    Checks for CLI flags that trigger utility actions instead of running tests.
    Returns an exit code (int) if an action was performed, otherwise None.
    """
    if config.version:
        print(f"bddhooks {VERSION} & behave {behave_version}")
        return 0

    return None


@contextmanager
def handle_test_environment(config: Configuration) -> Generator[None, None, None]:
    """
    Context manager exporting the connection settings to the process environment
    for the duration of the run, restoring the previous values afterwards.
    """
    previous: Dict[str, Optional[str]] = {}
    for name, value in config.connection_values.items():
        previous[name] = os.environ.get(name)
        os.environ[name] = value

    try:
        yield
    finally:
        for name, value in previous.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value


def run_bddhooks(config: Configuration) -> int:
    """
    Runs the features using the behave framework.

    Args:
        config (Configuration): The bddhooks configuration object.

    Returns:
        int: The exit status code: 0 if all tests pass, > 0 if any test fails.
    """
    result = handle_utility_functions(config)

    if result is None:
        with handle_test_environment(config):
            result = run_behave(config)

    return result


def main() -> int:
    """
    Main entry point for the bddhooks command-line utility.

    Returns:
        int: The exit status code (0 for success, 1 for any failure).
    """
    try:
        config = Configuration(load_config=False)
        return run_bddhooks(config)
    except ConfigError as e:
        exception_class_name = e.__class__.__name__
        print(f"{exception_class_name}: {e}")
    except TagExpressionError as e:
        print(f"TagExpressionError: {e}")
    except (NotSupportedWarning, HookError) as e:
        print(e)
    except Exception:
        traceback.print_exc()

    return 1  # FAILED


if __name__ == "__main__":
    sys.exit(main())
