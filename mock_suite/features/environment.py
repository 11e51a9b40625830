"""
Hooks defined in this module execute before and after specific events
during the run. The tagged hooks (@C*, @MongoDB, @elasticsearch, @Aerospike
and @web) come from bddhooks; suite-specific setup goes around them.

Official Behave documentation: https://behave.readthedocs.io/en/latest/api/#environment-file-functions
"""

from behave.model import Feature
from behave.runner import Context

from bddhooks.environment import after_scenario, before_all, before_scenario  # noqa: F401


def before_feature(context: Context, feature: Feature):
    """
    Executed before each feature.
    """


def after_feature(context: Context, feature: Feature):
    """
    Executed after each feature.
    """
