"""Error handling utilities."""

from typing import Optional


class TaskDeskError(Exception):
    """Base exception for TaskDesk backend."""
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UploadError(TaskDeskError):
    """Upload pipeline error."""
    pass


class NoFileError(UploadError):
    """No file payload present on the request."""
    status_code = 400
    default_message = "No file uploaded"


class UnsupportedFormatError(UploadError):
    """File extension outside the accepted set."""
    status_code = 400
    default_message = "Invalid file type. Only CSV, XLSX, and XLS files are allowed."


class FileTooLargeError(UploadError):
    """File exceeds the upload size limit."""
    status_code = 400
    default_message = "File size too large. Maximum size is 5MB."


class ParseError(UploadError):
    """Malformed CSV stream or unreadable workbook."""
    default_message = "Error processing file"


class NoValidTasksError(UploadError):
    """No row in the file passed validation."""
    status_code = 400
    default_message = "No valid tasks found in the file."


class NoAgentsAvailableError(UploadError):
    """Agent directory is empty."""
    status_code = 400
    default_message = "No agents available for task distribution"


class PersistenceError(TaskDeskError):
    """Supabase operation error."""
    pass


class AuthenticationError(TaskDeskError):
    """Missing or invalid access token."""
    status_code = 401
    default_message = "Token is not valid"


class AuthorizationError(TaskDeskError):
    """Authenticated user lacks the required role."""
    status_code = 403
    default_message = "Access denied. Admin only."


class InvalidUpdateError(TaskDeskError):
    """Task update touches fields other than status and notes."""
    status_code = 400
    default_message = "Invalid updates!"


class TaskNotFoundError(TaskDeskError):
    """No task with the requested ID."""
    status_code = 404
    default_message = "Task not found"
