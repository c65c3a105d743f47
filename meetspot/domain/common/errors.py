"""Domain error types."""
from typing import Optional


class DomainError(Exception):
    """Base domain error."""
    pass


class NotFoundError(DomainError):
    """Resource not found."""
    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        self.message = f"{resource} with id {identifier} not found"
        super().__init__(self.message)


class ValidationError(DomainError):
    """Malformed input (missing reason, impossible birth date, ...)."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotAuthorizedError(DomainError):
    """Caller lacks the role required for the attempted transition."""
    def __init__(self, message: str = "Not authorized"):
        self.message = message
        super().__init__(message)


class InvalidStateError(DomainError):
    """Operation is not legal from the entity's current state."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidOperationError(DomainError):
    """Request is illegal regardless of state (e.g. befriending yourself)."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AccessDeniedError(DomainError):
    """Access engine refused admission. `reason` is a machine-readable code."""
    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        self.message = message or f"Access denied ({reason})"
        super().__init__(self.message)


class CapacityExceededError(DomainError):
    """Activity has no free places left."""
    def __init__(self, activity_id: str, capacity: int):
        self.activity_id = activity_id
        self.capacity = capacity
        self.message = f"Activity {activity_id} is full (capacity {capacity})"
        super().__init__(self.message)


class ConflictError(DomainError):
    """Resource conflict error (duplicate create, lost compare-and-swap)."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
