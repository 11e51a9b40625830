from typing import Any, Callable

from behave.formatter.base import Formatter
from behave.reporter.base import Reporter

__all__ = ["DeferredOutput", "DeferredReporter", "DeferredFormatter"]


def _skip(*args: Any, **kwargs: Any) -> None:
    pass


class DeferredOutput:
    """
    Proxy for a behave formatter or reporter, run once per browser pass.

    behave finishes its outputs at the end of every `run_model()`. The method named
    by `deferred` is ignored on the proxy and only reaches the target on `release()`,
    after the last browser pass.
    """

    deferred: str = ""

    def __init__(self, target):
        self.target = target

    def __getattr__(self, name: str) -> Any:
        if name == self.deferred:
            return _skip
        return getattr(self.target, name)

    def release(self) -> None:
        finish: Callable[[], None] = getattr(self.target, self.deferred)
        finish()


class DeferredReporter(DeferredOutput):
    target: Reporter
    deferred = "end"


class DeferredFormatter(DeferredOutput):
    target: Formatter
    deferred = "close"
