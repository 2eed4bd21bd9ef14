class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_content(self) -> dict:
        return {"success": False, "message": self.message, "details": self.details}


class ValidationError(AppError):
    """Raised when a request is missing required fields or carries malformed values."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class ConflictError(AppError):
    """Raised when a write would double-book a teacher, location, class group or substitute."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class ScheduleConflictError(ConflictError):
    """Carries the colliding schedule entry so callers can offer a replacement."""
    def __init__(self, message: str, conflict: dict):
        super().__init__(message, details={"kind": conflict.get("kind")})
        self.conflict = conflict

    def to_content(self) -> dict:
        content = super().to_content()
        content["conflict"] = self.conflict
        return content


class IntegrityConflictError(AppError):
    """Raised when a store-level reference constraint blocks a write."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class TransientError(AppError):
    """Raised when the store fails for reasons unrelated to the request."""
    def __init__(self, message: str = "Database error occurred."):
        super().__init__(message, status_code=500)


class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
