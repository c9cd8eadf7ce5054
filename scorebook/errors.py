"""
Errors raised at the scoring service and event log boundaries.

The stat fold never raises on a well-formed event sequence; these are
reported to the caller before anything reaches the log.
"""


class ScorebookError(Exception):
    """Base class for all scorebook errors."""


class ValidationError(ScorebookError, ValueError):
    """A malformed ball event or match setup request."""


class StateError(ScorebookError, RuntimeError):
    """An operation not allowed in the current match state.

    Undo on an empty innings, scoring after the innings has ended,
    starting the second innings before the first is complete.
    """
