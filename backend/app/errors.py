# workflow error taxonomy
# each error knows its http status; the app-level handler in main.py renders them

from typing import Optional


class WorkflowError(Exception):
    """base class for every error the workflow layer can report"""

    status_code: int = 500
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message}

    def __eq__(self, other):
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((type(self), self.message))


class Unauthenticated(WorkflowError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(WorkflowError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(WorkflowError):
    status_code = 404
    default_message = "Record not found"


class ValidationFailed(WorkflowError):
    """field-level validation failure raised after the request body was parsed"""

    status_code = 400
    default_message = "Validation failed"

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "field": self.field}


class Conflict(WorkflowError):
    status_code = 409
    default_message = "Record was modified by another request, fetch it again and retry"


class InvalidTransition(Conflict):
    """requested (from, to) pair is not in the transition table"""

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid status transition: {from_status} -> {to_status}")

    def to_dict(self) -> dict:
        return {"detail": self.message, "from": self.from_status, "to": self.to_status}


class StoreFailure(WorkflowError):
    status_code = 500
    default_message = "Internal server error"
