import threading
from typing import List, NoReturn, Optional, Tuple

from .constants import BROWSER_VERSION_SEPARATOR
from .exceptions import HookFailure

_thread_properties = threading.local()


class ThreadProperty:
    """Per-thread string properties shared between the runner and the hooks.

    The runner stores the browser under test here before each pass, and the web
    hook reads it back on the same thread.
    """

    @staticmethod
    def _properties() -> dict:
        if not hasattr(_thread_properties, "values"):
            _thread_properties.values = {}
        return _thread_properties.values

    @classmethod
    def set(cls, name: str, value: str) -> None:
        cls._properties()[name] = value

    @classmethod
    def get(cls, name: str, default: str = "") -> str:
        return cls._properties().get(name, default)

    @classmethod
    def remove(cls, name: str) -> None:
        cls._properties().pop(name, None)


class ExceptionList:
    """Process-wide accumulator of exceptions captured by step definitions."""

    _instance: Optional["ExceptionList"] = None
    _lock = threading.Lock()

    def __init__(self):
        self.exceptions: List[Exception] = []

    @classmethod
    def get_instance(cls) -> "ExceptionList":
        """Returns the single shared instance, creating it on first use."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def add(self, exception: Exception) -> None:
        self.exceptions.append(exception)

    def clear(self) -> None:
        self.exceptions.clear()


def parse_browser(browser: str) -> Tuple[str, str]:
    """Splits a browser identifier into its name and version.

    Args:
        browser (str): The identifier, formatted as NAME_VERSION (e.g., 'chrome_120').

    Returns:
        Tuple[str, str]: The browser name and version. The version is empty when the
                         identifier carries none.

    Examples:
        >>> parse_browser("firefox_115.0")
        ('firefox', '115.0')
        >>> parse_browser("phantomjs")
        ('phantomjs', '')
    """
    name, _, version = browser.partition(BROWSER_VERSION_SEPARATOR)
    return name, version


def fail(message: str) -> NoReturn:
    """Fails the running hook or step with the given message.

    :raises HookFailure: Always.
    """
    raise HookFailure(message)


def describe_exception(exception: BaseException) -> str:
    """Formats an exception as 'ClassName: message'."""
    return f"{exception.__class__.__name__}: {exception}"
