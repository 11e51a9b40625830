class HookError(Exception):
    """Base exception for all errors raised by the hook layer."""


class DBError(HookError):
    """Custom exception raised when a data store client operation fails."""


class UnknownBrowserError(HookError):
    """Raised when a browser requested for a web scenario is not supported."""


class HookFailure(AssertionError):
    """Explicit failure of a hook; behave reports it as a failed scenario."""
