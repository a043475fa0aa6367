# Error taxonomy raised by the CRUD layer and rendered by app.main handlers


class ActivityError(Exception):
    """Base error. kind is the stable machine-readable name, message is for humans."""

    kind = "Error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(ActivityError):
    """Malformed or out-of-range input."""

    kind = "ValidationError"
    status_code = 400


class Unauthenticated(ActivityError):
    """No resolved caller identity. Raised at the boundary, never inside the core."""

    kind = "Unauthenticated"
    status_code = 401


class Forbidden(ActivityError):
    kind = "Forbidden"
    status_code = 403


class NotFound(ActivityError):
    """Missing activity/user, or an activity in a terminal state that hides it."""

    kind = "NotFound"
    status_code = 404


class Conflict(ActivityError):
    kind = "Conflict"
    status_code = 409


class CapacityExceeded(Conflict):
    """Activity is full. Separate kind so callers can show a different message."""

    kind = "CapacityExceeded"


class PersistenceError(ActivityError):
    """Storage failure. The transaction has been rolled back; nothing was written."""

    kind = "PersistenceError"
    status_code = 500
