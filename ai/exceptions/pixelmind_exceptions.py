"""Custom exceptions for the PixelMind client"""
from typing import Optional


class PixelMindError(Exception):
    """Base exception for PixelMind client errors"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class APIError(PixelMindError):
    """Exception for failed calls to the PixelMind API.

    ``transient`` marks failures that might succeed if repeated (timeouts,
    connection errors, 429 and 5xx). Nothing retries automatically; the flag
    is informational.
    """
    def __init__(self, message: str, status_code: Optional[int] = None, transient: bool = False):
        super().__init__(message, status_code)
        self.transient = transient


class ModelListError(APIError):
    """GET /api/models failed"""
    pass


class SchemaFetchError(APIError):
    """GET /api/schema failed or returned a malformed schema"""
    pass


class GenerationError(APIError):
    """POST /api/image failed or returned no image reference"""
    pass


class DownloadError(APIError):
    """The generated image could not be fetched or written"""
    pass


class FormValidationError(PixelMindError):
    """Exception for invalid form edits"""
    pass


class UnknownFieldError(FormValidationError):
    """The field is not declared by the current schema"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown field: {name}")


class FieldValueError(FormValidationError):
    """The raw input cannot be read as the field's declared type"""
    def __init__(self, name: str, raw: str, expected_type: str):
        self.name = name
        self.raw = raw
        self.expected_type = expected_type
        super().__init__(f"Field '{name}' expects a {expected_type}, got {raw!r}")
