"""
Scenario lifecycle hooks selected by scenario tags.

Each hook opens or closes the connection to one external system:

    @C*             Cassandra
    @MongoDB        MongoDB
    @elasticsearch  ElasticSearch
    @Aerospike      Aerospike
    @web            Selenium Grid (remote browser session)

Before hooks run in ascending order and after hooks in descending order, so the
untagged order-0 hooks wrap all the tagged ones.
"""

from typing import Callable, Dict, Iterator, List, NamedTuple, Optional

from selenium import webdriver

from .browsers import build_browser_options
from .common import CommonSpec
from .constants import (
    BROWSER_PROPERTY,
    IMPLICITLY_WAIT,
    ORDER_0,
    ORDER_10,
    ORDER_20,
    PAGE_LOAD_TIMEOUT,
    SCRIPT_TIMEOUT,
    TAG_AEROSPIKE,
    TAG_CASSANDRA,
    TAG_ELASTICSEARCH,
    TAG_MONGODB,
    TAG_WEB,
)
from .exceptions import DBError, UnknownBrowserError
from .types import HookFunction, Tags
from .utils import ThreadProperty, describe_exception, fail, parse_browser

__all__ = ["Hook", "HookSpec", "before", "after"]

BEFORE = "before"
AFTER = "after"


class Hook(NamedTuple):
    kind: str
    order: int
    tag: Optional[str]
    name: str

    def matches(self, tags: Tags) -> bool:
        """Untagged hooks match every scenario; tagged hooks need their exact tag."""
        return self.tag is None or self.tag in {normalize_tag(tag) for tag in tags}


def normalize_tag(tag: str) -> str:
    return tag[1:] if tag.startswith("@") else tag


def _register(kind: str, order: int, tag: Optional[str]) -> Callable[[HookFunction], HookFunction]:
    def decorator(func: HookFunction) -> HookFunction:
        func.__hook__ = Hook(kind, order, None if tag is None else normalize_tag(tag), func.__name__)
        return func

    return decorator


def before(order: int = ORDER_0, tag: Optional[str] = None) -> Callable[[HookFunction], HookFunction]:
    """Registers a HookSpec method to run before matching scenarios."""
    return _register(BEFORE, order, tag)


def after(order: int = ORDER_0, tag: Optional[str] = None) -> Callable[[HookFunction], HookFunction]:
    """Registers a HookSpec method to run after matching scenarios."""
    return _register(AFTER, order, tag)


class HookSpec:
    """
    The set of tagged hooks, bound to the shared state of the run.

    Subclasses may add hooks with the `before`/`after` decorators or override
    existing ones by redefining a method with the same name.
    """

    def __init__(self, commonspec: CommonSpec):
        self.commonspec = commonspec

    @classmethod
    def iter_hooks(cls) -> Iterator[Hook]:
        """Yields the registered hooks in declaration order, base classes first."""
        hooks: Dict[str, Hook] = {}
        for klass in reversed(cls.__mro__):
            for attr in vars(klass).values():
                hook = getattr(attr, "__hook__", None)
                if isinstance(hook, Hook):
                    hooks[hook.name] = hook
        yield from hooks.values()

    def select_hooks(self, kind: str, tags: Tags) -> List[Hook]:
        """Returns the hooks of a kind matching the tags, in execution order."""
        selected = [hook for hook in self.iter_hooks() if hook.kind == kind and hook.matches(tags)]
        return sorted(selected, key=lambda hook: hook.order, reverse=kind == AFTER)

    def run_before_hooks(self, tags: Tags) -> None:
        """Runs the matching before hooks; the first failure stops the sequence."""
        for hook in self.select_hooks(BEFORE, tags):
            getattr(self, hook.name)()

    def run_after_hooks(self, tags: Tags) -> None:
        """Runs every matching after hook, then re-raises the first failure, if any."""
        errors: List[Exception] = []
        for hook in self.select_hooks(AFTER, tags):
            try:
                getattr(self, hook.name)()
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.commonspec.logger.error("After hook %r failed: %s", hook.name, describe_exception(e))
                errors.append(e)

        if errors:
            raise errors[0]

    # --- Before hooks ---

    @before(order=ORDER_0)
    def global_setup(self) -> None:
        """Clean the exception list."""
        self.commonspec.logger.info("Clearing exception list")
        self.commonspec.exceptions.clear()

    @before(order=ORDER_10, tag=TAG_CASSANDRA)
    def cassandra_setup(self) -> None:
        self.commonspec.logger.info("Setting up C* client")
        self.commonspec.get_cassandra_client().connect()

    @before(order=ORDER_10, tag=TAG_MONGODB)
    def mongo_setup(self) -> None:
        self.commonspec.logger.info("Setting up MongoDB client")
        try:
            self.commonspec.get_mongodb_client().connect()
        except DBError as e:
            fail(describe_exception(e))

    @before(order=ORDER_10, tag=TAG_ELASTICSEARCH)
    def elasticsearch_setup(self) -> None:
        self.commonspec.logger.info("Setting up elasticsearch client")
        self.commonspec.get_elasticsearch_client().connect()

    @before(order=ORDER_10, tag=TAG_AEROSPIKE)
    def aerospike_setup(self) -> None:
        self.commonspec.logger.info("Setting up Aerospike client")
        self.commonspec.get_aerospike_client().connect()

    @before(order=ORDER_10, tag=TAG_WEB)
    def selenium_setup(self) -> None:
        """
        Opens a remote browser session on the Selenium Grid for the browser
        stored in the 'browser' thread property (NAME_VERSION).
        """
        browser_property = ThreadProperty.get(BROWSER_PROPERTY)
        if not browser_property:
            fail("Non available browsers")

        browser, version = parse_browser(browser_property)
        self.commonspec.browser_name = browser
        self.commonspec.logger.info("Setting up selenium for %s", browser)

        try:
            options = build_browser_options(browser, version)
        except UnknownBrowserError as e:
            self.commonspec.logger.error(str(e))
            raise

        grid_url = self.commonspec.settings.selenium_grid_url
        driver = webdriver.Remote(command_executor=grid_url, options=options)
        self.commonspec.driver = driver

        driver.set_page_load_timeout(PAGE_LOAD_TIMEOUT)
        driver.implicitly_wait(IMPLICITLY_WAIT)
        driver.set_script_timeout(SCRIPT_TIMEOUT)

        driver.delete_all_cookies()
        driver.maximize_window()

    # --- After hooks ---

    @after(order=ORDER_20, tag=TAG_WEB)
    def selenium_teardown(self) -> None:
        driver = self.commonspec.driver
        if driver is None:
            return

        self.commonspec.logger.info("Shutdown Selenium client")
        try:
            driver.close()
            driver.quit()
        finally:
            self.commonspec.driver = None

    @after(order=ORDER_20, tag=TAG_CASSANDRA)
    def cassandra_teardown(self) -> None:
        self.commonspec.logger.info("Shutdown C* client")
        try:
            self.commonspec.get_cassandra_client().disconnect()
        except DBError as e:
            fail(describe_exception(e))

    @after(order=ORDER_20, tag=TAG_MONGODB)
    def mongo_teardown(self) -> None:
        self.commonspec.logger.info("Shutdown MongoDB client")
        self.commonspec.get_mongodb_client().disconnect()

    @after(order=ORDER_20, tag=TAG_ELASTICSEARCH)
    def elasticsearch_teardown(self) -> None:
        self.commonspec.logger.info("Shutdown elasticsearch client")
        try:
            self.commonspec.get_elasticsearch_client().disconnect()
        except DBError as e:
            fail(describe_exception(e))

    @after(order=ORDER_20, tag=TAG_AEROSPIKE)
    def aerospike_teardown(self) -> None:
        self.commonspec.logger.info("Shutdown Aerospike client")
        try:
            self.commonspec.get_aerospike_client().disconnect()
        except DBError as e:
            fail(describe_exception(e))

    @after(order=ORDER_0)
    def teardown(self) -> None:
        self.commonspec.logger.info("Ended running hooks")
