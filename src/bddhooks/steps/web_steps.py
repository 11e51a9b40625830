"""Steps driving the browser session opened by the '@web' hook."""

from urllib.parse import urljoin

from behave import given, then
from behave.runner import Context
from selenium.webdriver.remote.webdriver import WebDriver

from ..utils import fail
from .common_steps import capture_exceptions, get_commonspec

BASE_URL_USERDATA = "base_url"


def get_driver(context: Context) -> WebDriver:
    driver = get_commonspec(context).driver
    if driver is None:
        fail("No browser session. Tag the scenario with '@web'.")
    return driver


@given("I browse to '{path}'")
def step_browse_to(context: Context, path: str):
    """
    Given step: Opens the page. Relative paths are resolved against the
    'base_url' userdata (-D base_url=...).
    """
    base_url = context.config.userdata.get(BASE_URL_USERDATA, "")
    url = urljoin(base_url, path) if base_url else path

    commonspec = get_commonspec(context)
    with capture_exceptions(commonspec):
        get_driver(context).get(url)


@then("the page title is '{title}'")
def step_page_title(context: Context, title: str):
    actual = get_driver(context).title
    assert actual == title, f"Page title mismatch. Expected: {title!r}, Actual: {actual!r}"


@then("the browser under test is '{browser}'")
def step_browser_under_test(context: Context, browser: str):
    actual = get_commonspec(context).browser_name
    assert actual.lower() == browser.lower(), f"Browser mismatch. Expected: {browser!r}, Actual: {actual!r}"
