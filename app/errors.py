"""
Error taxonomy shared by services and routers.

Services raise these instead of HTTPException; app.main maps each class to a
status code through a single exception handler.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors surfaced to API clients"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(AppError):
    # Message stays generic so callers cannot tell which check failed
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ExternalServiceError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "External service failure"


class CalendarError(ExternalServiceError):
    default_message = "Calendar provider failure"


class MailError(ExternalServiceError):
    default_message = "Mail transport failure"


class PersistenceError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable: Database is not connected"


class ConfigurationError(AppError):
    default_message = "Server is missing required configuration"
