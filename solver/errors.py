"""Exceptions for caller/engine contract violations. Expected puzzle outcomes (no solution, several solutions, generation falling short of its target) are returned as values, never raised."""


class InvalidSpecError(ValueError):
    """Grid size and block shape do not tile the grid."""


class InvalidBoardError(ValueError):
    """Board has the wrong length or holds a value outside 0..N."""


class StepPreconditionError(RuntimeError):
    """A step was applied to a grid that no longer satisfies its precondition."""
