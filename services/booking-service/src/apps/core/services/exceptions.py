# services/booking-service/src/apps/core/services/exceptions.py
"""
Scheduling Engine Exceptions

Typed failures raised inside the engine. The orchestrator turns them into
Rejected values for booking operations; query operations let them propagate.
"""

from datetime import date
from enum import Enum
from typing import Optional, Dict, Any


class RejectionReason(str, Enum):
    """Reasons a booking operation can be rejected."""
    CONFLICT = 'conflict'
    INVALID_INTERVAL = 'invalid_interval'
    INVALID_TRANSITION = 'invalid_transition'
    NOT_FOUND = 'not_found'


class SchedulingError(Exception):
    """Base exception for scheduling engine errors."""

    reason: Optional[RejectionReason] = None

    def __init__(
        self,
        message: str,
        code: str = "SCHEDULING_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInterval(SchedulingError):
    """Raised for malformed, empty or out-of-window intervals."""

    reason = RejectionReason.INVALID_INTERVAL

    def __init__(
        self,
        message: str = "Invalid interval",
        code: str = "INVALID_INTERVAL",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code=code, details=details)


class InvalidRange(InvalidInterval):
    """Raised when a rental date range is malformed or outside duration limits."""

    def __init__(
        self,
        start_date: date,
        end_date: date,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"End date {end_date} is before start date {start_date}"
        error_details = details or {}
        error_details.update({
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        })
        super().__init__(message=msg, code="INVALID_RANGE", details=error_details)


class Conflict(SchedulingError):
    """Raised when the requested interval is not free."""

    reason = RejectionReason.CONFLICT

    def __init__(
        self,
        message: str = "The requested time is no longer available",
        code: str = "CONFLICT",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code=code, details=details)


class RangeConflict(Conflict):
    """First day of a rental range that cannot be booked."""

    def __init__(self, day: date, reason: str, details: Optional[Dict[str, Any]] = None):
        self.day = day
        self.day_reason = reason
        error_details = details or {}
        error_details.update({"day": day.isoformat(), "reason": reason})
        super().__init__(
            message=f"{day.isoformat()} is not available ({reason})",
            code="RANGE_CONFLICT",
            details=error_details
        )


class InvalidTransition(SchedulingError):
    """Raised when a lifecycle change is not allowed."""

    reason = RejectionReason.INVALID_TRANSITION

    def __init__(
        self,
        current_state: str,
        target_state: str,
        actor: str = None,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"Cannot transition from {current_state} to {target_state}"
        error_details = details or {}
        error_details.update({
            "current_state": current_state,
            "target_state": target_state,
        })
        if actor:
            error_details["actor"] = actor
        super().__init__(message=msg, code="INVALID_TRANSITION", details=error_details)


class NotFound(SchedulingError):
    """Raised when a listing or booking does not exist."""

    reason = RejectionReason.NOT_FOUND

    def __init__(self, entity: str, entity_id: Any = None, message: str = None):
        msg = message or f"{entity.capitalize()} not found: {entity_id}"
        super().__init__(
            message=msg,
            code="NOT_FOUND",
            details={"entity": entity, "id": str(entity_id) if entity_id else None}
        )


class ConstraintViolation(SchedulingError):
    """Raised by storage when a write would break the no-overlap guarantee."""

    reason = RejectionReason.CONFLICT

    def __init__(self, message: str = "Booking overlaps a committed booking", details=None):
        super().__init__(message=message, code="CONSTRAINT_VIOLATION", details=details)
