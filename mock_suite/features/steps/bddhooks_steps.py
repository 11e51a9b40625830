# Registers the reusable bddhooks steps for this suite.
from bddhooks.steps import common_steps, datastore_steps, web_steps  # noqa: F401
