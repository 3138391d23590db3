"""
Domain errors raised by the planning agents.

Routers translate these into HTTP responses; upstream (Yelp) problems never
leave the client as exceptions and degrade to empty results instead.
"""


class PlanningError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PlanningError):
    """Referenced record does not exist or is not owned by the caller."""

    status_code = 404


class MissingFieldError(PlanningError):
    """A required field is absent or malformed."""

    status_code = 400

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"Missing required field: {field}")
        self.field = field


class StageTransitionError(PlanningError):
    """Transition would move a planning session backwards."""

    status_code = 409


class UpstreamError(Exception):
    """The AI provider failed, timed out, or answered with garbage."""
