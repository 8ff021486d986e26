"""
Exception hierarchy.

Invariant errors signal caller contract violations and are never caught
inside the package. Persistence errors are recoverable: callers decide
whether to fall back to a fresh table.
"""


class MenaceError(Exception):
    """Base class for all package errors."""


class InvariantViolation(MenaceError):
    """Internal consistency between record, table and game was broken."""


class NoLegalActions(InvariantViolation):
    """A choice was requested for a state with no beads (terminal state)."""

    def __init__(self, state: str):
        super().__init__(f"No legal actions for state {state!r}")
        self.state = state


class InconsistentState(InvariantViolation):
    """The table's matchbox for a state disagrees with the caller's legal moves."""

    def __init__(self, state: str, action: int, legal_actions):
        super().__init__(
            f"Matchbox {state!r} selected action {action}, "
            f"which is not among the legal actions {list(legal_actions)}"
        )
        self.state = state
        self.action = action


class PersistenceError(MenaceError):
    """Loading or saving the matchbox table failed."""


class TableNotFound(PersistenceError):
    pass


class MalformedTable(PersistenceError):
    pass


class IllegalMove(MenaceError, ValueError):
    """A move was attempted on an occupied or out-of-range cell."""
