"""
Errors raised by the bracket engine.

Every error carries a human readable message and is recovered at the API
boundary, where it is mapped to a structured error payload.
"""


class BracketError(Exception):
    """Base class for all bracket engine errors."""


class NotFound(BracketError):
    """A tournament or match does not exist."""


class ValidationError(BracketError):
    """A request is malformed: bad score, non-participant winner, match not ready."""


class InsufficientTeams(ValidationError):
    """Not enough registered teams to build the requested format."""


class StateConflict(BracketError):
    """The graph is in a state that forbids the request (e.g. match already decided)."""


class UnsupportedFormat(BracketError):
    """The bracket type / team count combination cannot be constructed."""
