"""
Domain errors raised by the pathway core and the data-access layer.
The HTTP layer maps them to status codes (see learnpath.api).
"""


class PathwayError(Exception):
    """Base class for domain errors."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(PathwayError):
    """Referenced profile, goal, pathway, module or resource does not exist."""

    status_code = 404


class ConflictError(PathwayError):
    """Active pathway already exists for {user, goal}, or a concurrent write won."""

    status_code = 409


class InvalidStateError(PathwayError):
    """Mutation not allowed in the pathway's current state."""

    status_code = 400
