"""Custom exception hierarchy."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class IngestionError(AppError):
    """Raised when an uploaded file or row set cannot be read."""
    pass


class OpportunityNotFoundError(AppError):
    """Raised when an opportunity is not found."""
    pass


class TaskAlreadyLinkedError(AppError):
    """Raised when an opportunity already has a linked task."""

    def __init__(self, message: str, task_id: Optional[str] = None):
        super().__init__(message)
        self.task_id = task_id
