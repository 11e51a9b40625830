"""Steps asserting on the exceptions collected during a scenario."""

from contextlib import contextmanager
from typing import Generator

from behave import then
from behave.runner import Context
from selenium.common.exceptions import WebDriverException

from ..common import CommonSpec
from ..environment import get_hookspec
from ..exceptions import HookError
from ..utils import ExceptionList

__all__ = ["capture_exceptions", "get_commonspec"]

EXCEPTION_STATES = ("IS", "IS NOT")


def get_commonspec(context: Context) -> CommonSpec:
    return get_hookspec(context).commonspec


@contextmanager
def capture_exceptions(commonspec: CommonSpec) -> Generator[None, None, None]:
    """
    Records data store and browser errors raised inside the block in the
    exception list instead of failing the step, so a later step can assert on them.
    """
    try:
        yield
    except (HookError, WebDriverException) as e:
        commonspec.logger.info("Captured %s: %s", e.__class__.__name__, e)
        ExceptionList.get_instance().add(e)


def _check_state(state: str) -> bool:
    if state not in EXCEPTION_STATES:
        raise ValueError(f"Exception state must be one of {EXCEPTION_STATES}, got {state!r}")
    return state == "IS"


@then("an exception '{state}' thrown")
def step_exception_thrown(context: Context, state: str):
    """
    Then step: 'IS' expects at least one captured exception, 'IS NOT' expects none.
    """
    expected = _check_state(state)
    exceptions = get_commonspec(context).exceptions

    if expected:
        assert exceptions, "Expected an exception to be thrown, but none was captured."
    else:
        assert not exceptions, f"Expected no exception, but captured: {exceptions!r}"


@then("an exception '{state}' thrown with class '{class_name}'")
def step_exception_thrown_with_class(context: Context, state: str, class_name: str):
    expected = _check_state(state)
    captured = [e.__class__.__name__ for e in get_commonspec(context).exceptions]

    if expected:
        assert class_name in captured, f"Expected a {class_name!r} exception, captured: {captured!r}"
    else:
        assert class_name not in captured, f"Unexpected {class_name!r} exception captured."
