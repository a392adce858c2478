"""
Error classes for larafleet.

Every error here is terminal for the operation in progress; nothing is
retried internally. The CLI catches LarafleetError at the command boundary,
prints one diagnostic line and exits non-zero.
"""


class LarafleetError(Exception):
    """Base exception for larafleet."""
    pass


class ConfigurationError(LarafleetError):
    """
    Malformed or missing declarative input.

    Examples:
    - missing stage
    - declaration file not found or failing validation
    - no deployable component declared
    """
    pass


class NotFoundError(LarafleetError):
    """No cluster matches the stage/component pattern."""
    pass


class AmbiguousMatchError(LarafleetError):
    """
    Several deployable components are declared and no explicit cluster
    was given. The caller must pass a cluster selector.
    """
    pass


class NoRunningTasksError(LarafleetError):
    """The cluster exists but has no running tasks."""
    pass


class UnsupportedLogDriverError(LarafleetError):
    """The task's log configuration is not the awslogs driver."""
    pass


class SelectionCancelled(LarafleetError):
    """The operator cancelled the interactive task selection."""
    pass
