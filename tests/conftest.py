from types import SimpleNamespace
from typing import Iterator

import pytest

from src.bddhooks.common import CommonSpec
from src.bddhooks.constants import BROWSER_PROPERTY
from src.bddhooks.settings import ConnectionSettings, load_connection_settings
from src.bddhooks.utils import ExceptionList, ThreadProperty


@pytest.fixture(autouse=True)
def reset_shared_state() -> Iterator[None]:
    """Clears the process-wide state (exception list, thread properties, clients) around each test."""
    ExceptionList.get_instance().clear()
    ThreadProperty.remove(BROWSER_PROPERTY)
    CommonSpec.reset_clients()
    yield
    ExceptionList.get_instance().clear()
    ThreadProperty.remove(BROWSER_PROPERTY)
    CommonSpec.reset_clients()


@pytest.fixture
def default_settings() -> ConnectionSettings:
    """Connection settings built from defaults only, independent of the test host environment."""
    return load_connection_settings({})


@pytest.fixture
def behave_context() -> SimpleNamespace:
    """A minimal stand-in for behave's Context: attribute storage plus config.userdata."""
    return SimpleNamespace(config=SimpleNamespace(userdata={}), table=None)
