"""Planner error types."""


class PlannerError(Exception):
    """Base class for planner failures."""


class PreconditionError(PlannerError):
    """A required input is missing, so the operation cannot proceed."""
