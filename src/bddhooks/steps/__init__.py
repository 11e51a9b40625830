"""
Reusable step definitions. Importing a module registers its steps with behave,
so a suite enables them from a module in its 'steps' directory:

    from bddhooks.steps import common_steps, datastore_steps, web_steps  # noqa: F401
"""
