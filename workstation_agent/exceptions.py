"""Custom exception classes for the workstation agent."""

from typing import Optional


class WorkstationError(Exception):
    """Base exception for workstation agent errors."""
    pass


class ActionValidationError(WorkstationError):
    """Exception raised when an AI decision does not match the action vocabulary."""
    pass


class DesktopError(WorkstationError):
    """Exception raised for simulated desktop errors."""
    pass


class ApiError(WorkstationError):
    """Exception raised when a backend call fails.

    Carries the HTTP status (0 when the backend could not be reached) and the
    short message the backend returned.
    """

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self) -> str:
        return self.message


class StoreError(WorkstationError):
    """Base exception for backend store errors."""

    status = 500


class InvalidRequestError(StoreError):
    """Exception raised for missing or malformed request data."""

    status = 400


class AuthenticationError(StoreError):
    """Exception raised for missing, unknown or invalid credentials."""

    status = 401


class NotFoundError(StoreError):
    """Exception raised when a file or session does not exist."""

    status = 404


class UserExistsError(StoreError):
    """Exception raised when signing up with a taken username."""

    status = 409


class AIServiceError(WorkstationError):
    """Exception raised when an upstream AI call fails."""
    pass


class AIServiceUnavailableError(AIServiceError):
    """Exception raised when the AI service is not configured."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason or "AI service is not configured.")
        self.reason = reason
