"""Capability negotiation for the remote browser sessions."""

from selenium.webdriver import ChromeOptions, FirefoxOptions
from selenium.webdriver.common.options import ArgOptions

from .constants import CHROME_ARGUMENTS
from .exceptions import UnknownBrowserError

__all__ = ["SUPPORTED_BROWSERS", "build_browser_options"]

SUPPORTED_BROWSERS = ("chrome", "firefox", "phantomjs")


def build_browser_options(browser: str, version: str = "") -> ArgOptions:
    """Builds the options requested from the Selenium Grid for a browser.

    Args:
        browser (str): Browser name, matched case-insensitively.
        version (str): Requested browser version. Left unset when empty.

    Returns:
        ArgOptions: Options to hand to ``webdriver.Remote``.

    Raises:
        UnknownBrowserError: If the browser is not one of SUPPORTED_BROWSERS.
    """
    name = browser.lower()

    if name == "chrome":
        options = ChromeOptions()
        for argument in CHROME_ARGUMENTS:
            options.add_argument(argument)
    elif name == "firefox":
        options = FirefoxOptions()
    elif name == "phantomjs":
        # No dedicated options class left in selenium; ask the grid by name.
        options = ArgOptions()
        options.set_capability("browserName", "phantomjs")
    else:
        raise UnknownBrowserError(f"Unknown browser: {browser}")

    if version:
        options.browser_version = version

    return options
