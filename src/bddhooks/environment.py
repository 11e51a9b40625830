"""
Behave environment functions running the tagged hooks.

A suite enables them by re-exporting them from its 'environment.py':

    from bddhooks.environment import after_scenario, before_all, before_scenario

Official Behave documentation: https://behave.readthedocs.io/en/latest/api/#environment-file-functions
"""

from behave.model import Scenario
from behave.runner import Context

from .common import CommonSpec
from .hooks import HookSpec

__all__ = ["before_all", "before_scenario", "after_scenario", "get_hookspec"]


def get_hookspec(context: Context) -> HookSpec:
    """Returns the HookSpec attached to the context, attaching a new one if missing."""
    hookspec = getattr(context, "hookspec", None)
    if hookspec is None:
        context.commonspec = CommonSpec()
        context.hookspec = hookspec = HookSpec(context.commonspec)
    return hookspec


def before_all(context: Context):
    """
    Attaches the shared state and the hooks to the root context, so they
    survive for the whole run.
    """
    get_hookspec(context)


def before_scenario(context: Context, scenario: Scenario):
    get_hookspec(context).run_before_hooks(scenario.effective_tags)


def after_scenario(context: Context, scenario: Scenario):
    get_hookspec(context).run_after_hooks(scenario.effective_tags)
