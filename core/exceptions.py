"""
Custom exceptions for the application.
Following domain-driven design principles with specific exception types.
Each exception carries the HTTP status the API layer renders it with.
"""


class BaseApplicationException(Exception):
    """Base exception for all application-specific exceptions"""
    default_message = "An application error occurred"
    default_code = "APPLICATION_ERROR"
    status_code = 400

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseApplicationException):
    """Raised when validation fails"""
    default_message = "Validation failed"
    default_code = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationException):
    """Raised when a resource is not found"""
    default_message = "Resource not found"
    default_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource_type=None, resource_id=None, **kwargs):
        self.resource_type = resource_type
        self.resource_id = resource_id
        if resource_type and 'message' not in kwargs:
            kwargs['message'] = f"{resource_type} not found"
        super().__init__(**kwargs)


class PermissionDeniedError(BaseApplicationException):
    """Raised when user doesn't have permission"""
    default_message = "Permission denied"
    default_code = "FORBIDDEN"
    status_code = 403


class AuthenticationFailedError(BaseApplicationException):
    """Raised when credentials are wrong"""
    default_message = "Invalid email or password"
    default_code = "AUTHENTICATION_FAILED"
    status_code = 401


class BusinessLogicError(BaseApplicationException):
    """Raised when business rule is violated"""
    default_message = "Business rule violation"
    default_code = "BUSINESS_RULE"


class ConflictError(BusinessLogicError):
    """Raised when the request collides with existing state (duplicates, open bookings)"""
    default_message = "Request conflicts with the current state"
    default_code = "CONFLICT"
    status_code = 409


class InvalidStateError(BusinessLogicError):
    """Raised when a status transition is not allowed"""
    default_message = "Operation not allowed in the current state"
    default_code = "INVALID_STATE"


class CapacityExceededError(BusinessLogicError):
    """Raised when a room has no free slot left"""
    default_message = "Room is at full capacity"
    default_code = "CAPACITY_EXCEEDED"
    status_code = 409


class ConcurrentModificationError(BusinessLogicError):
    """Raised when concurrent modification is detected"""
    default_message = "Resource is being modified by another user"
    default_code = "CONCURRENT_MODIFICATION"
    status_code = 409
