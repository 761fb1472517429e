"""Application exception hierarchy.

Learn: services raise these instead of HTTPException so they stay free of
HTTP concerns. main.py registers one handler that renders any
NotekeeperError as {"detail": message} with the class's status code.

    NotekeeperError
    ├── MissingToken        401  no token header
    ├── InvalidToken        403  token present but unverifiable
    ├── InvalidCredentials  401  login rejected
    ├── ValidationFailed    400  request is well-formed but not allowed
    ├── NotFound            404  absent, or not owned by the subject
    ├── Conflict            409  uniqueness violation
    └── StorageFailure      500  database error (cause is logged, never returned)
"""


class NotekeeperError(Exception):
    """Base class. `message` is safe to return to clients."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MissingToken(NotekeeperError):
    status_code = 401
    message = "Authentication required"


class InvalidToken(NotekeeperError):
    status_code = 403
    message = "Invalid or expired token"


class InvalidCredentials(NotekeeperError):
    status_code = 401
    message = "Invalid credentials"


class ValidationFailed(NotekeeperError):
    status_code = 400
    message = "Validation failed"


class NotFound(NotekeeperError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found")


class Conflict(NotekeeperError):
    status_code = 409
    message = "Conflict"


class StorageFailure(NotekeeperError):
    status_code = 500
    message = "Storage failure"
