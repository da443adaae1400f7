"""
Domain exceptions for the Trip Request Manager.

Services raise these; the handlers in app/api/errors.py turn them into
structured JSON responses at the request boundary.

Usage:
    from app.core.exceptions import NotFoundError, HasDependentsError

    if not destination:
        raise NotFoundError("Destination", destination_id)

    if dependents:
        raise HasDependentsError("Destination", dependents)
"""

from typing import Any, Dict, List, Optional


class TripRequestManagerError(Exception):
    """Base exception for all domain errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Validation (422)
# ============================================

class Violation:
    """One failed constraint, attributed to a field."""

    __slots__ = ("field", "rule", "message")

    def __init__(self, field: str, rule: str, message: str):
        self.field = field
        self.rule = rule
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "rule": self.rule, "message": self.message}

    def __eq__(self, other):
        if not isinstance(other, Violation):
            return NotImplemented
        return (self.field, self.rule) == (other.field, other.rule)

    def __repr__(self):
        return f"Violation({self.field!r}, {self.rule!r})"


class ValidationError(TripRequestManagerError):
    """One or more input constraints failed"""

    status_code = 422

    def __init__(self, violations: List[Violation], message: str = "The given data was invalid."):
        self.violations = list(violations)
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"errors": [v.to_dict() for v in self.violations]}
        )

    @classmethod
    def single(cls, field: str, rule: str, message: str) -> "ValidationError":
        return cls([Violation(field, rule, message)])

    @property
    def fields(self) -> List[str]:
        return [v.field for v in self.violations]


# ============================================
# Authentication & Authorization
# ============================================

class AuthenticationError(TripRequestManagerError):
    """Missing, expired or malformed credential (401)"""

    status_code = 401

    def __init__(self, message: str = "Unauthenticated."):
        super().__init__(message, code="UNAUTHENTICATED")


class UnauthorizedError(TripRequestManagerError):
    """Authenticated actor lacks the capability for this action (403)"""

    status_code = 403

    def __init__(self, message: str = "This action is unauthorized."):
        super().__init__(message, code="UNAUTHORIZED")


# ============================================
# Resource errors (404)
# ============================================

class NotFoundError(TripRequestManagerError):
    """Id does not resolve to a row"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


# ============================================
# Lifecycle & integrity (422)
# ============================================

class InvalidStateTransitionError(TripRequestManagerError):
    """Action is not legal for the entity's current status"""

    status_code = 422

    def __init__(self, message: str, current_status: Optional[str] = None, target_status: Optional[str] = None):
        details = {}
        if current_status is not None:
            details["current_status"] = current_status
        if target_status is not None:
            details["target_status"] = target_status
        super().__init__(message, code="INVALID_STATE_TRANSITION", details=details)


class HasDependentsError(TripRequestManagerError):
    """Delete refused while dependent rows exist"""

    status_code = 422

    def __init__(self, resource_type: str, count: int):
        self.count = count
        super().__init__(
            f"Cannot delete {resource_type.lower()} with associated trip requests.",
            code="HAS_DEPENDENTS",
            details={"count": count}
        )


class HasPendingDependentsError(TripRequestManagerError):
    """Deactivation refused while dependent rows are still pending"""

    status_code = 422

    def __init__(self, resource_type: str, count: int):
        self.count = count
        super().__init__(
            f"Cannot delete {resource_type.lower()} with pending trip requests.",
            code="HAS_PENDING_DEPENDENTS",
            details={"count": count}
        )


class NoActiveTravelerProfileError(TripRequestManagerError):
    """Trip request creation needs an active traveler profile"""

    status_code = 422

    def __init__(self):
        super().__init__(
            "User does not have an active traveler profile.",
            code="NO_ACTIVE_TRAVELER_PROFILE"
        )
