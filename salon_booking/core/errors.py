"""
Scheduling error taxonomy.

Services raise these; the API layer turns them into JSON responses with a
stable ``code`` and the matching HTTP status.
"""
from typing import Any, Dict, List, Optional


class SchedulingError(Exception):
    """Base class for all expected scheduling failures"""
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"code": self.code, "message": self.message}
        body.update(self.details)
        return body


class ValidationError(SchedulingError):
    """Malformed or out-of-range input"""
    status_code = 400
    code = "VALIDATION_ERROR"


class PastTimeError(ValidationError):
    code = "PAST_TIME"


class OutOfHoursError(ValidationError):
    code = "OUT_OF_HOURS"


class SameDayChangeError(ValidationError):
    code = "SAME_DAY_CHANGE"


class NotFoundError(SchedulingError):
    """Entity missing or not owned by the caller (deliberately the same answer)"""
    status_code = 404
    code = "NOT_FOUND"


class InvalidStateError(NotFoundError):
    """Transition not allowed from the entity's current status"""
    code = "INVALID_STATE"


class SlotConflictError(SchedulingError):
    """Requested interval overlaps a live booking or a recurring block"""
    status_code = 409
    code = "SLOT_CONFLICT"

    def __init__(self, message: str, conflicts: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.conflicts = conflicts or []

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        if self.conflicts:
            body["conflicts"] = self.conflicts
        return body
