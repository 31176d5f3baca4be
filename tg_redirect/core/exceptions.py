"""
Custom Exceptions

This module defines custom exceptions for the attribution code lifecycle
and the redirect flow.

Benefits:
- Format, signature and lookup failures are distinct types
- Endpoints map each type to one HTTP status
- Storage failures keep the backend error for logging
"""


class RedirectServiceException(Exception):
    """Base exception for the redirect & attribution service."""
    pass


class CodeFormatError(RedirectServiceException):
    """Raised when a code is empty, too long or has characters outside [A-Za-z0-9_-]."""

    def __init__(self, code: str):
        self.code = code
        super().__init__("Invalid code format")


class CodeNotFoundError(RedirectServiceException):
    """Raised when no mapping exists for a code (expired, deleted or never issued)."""

    def __init__(self, code: str):
        self.code = code
        super().__init__("Code not found")


class CodeSignatureError(CodeNotFoundError):
    """
    Raised when a well-formed code fails signature verification.

    Subclasses CodeNotFoundError so a forged code looks exactly like an
    unknown one to the caller.
    """
    pass


class SlugNotFoundError(RedirectServiceException):
    """Raised when a slug is unknown or inactive."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Slug '{slug}' not found or inactive")


class StorageError(RedirectServiceException):
    """Raised when a storage read fails while serving a request."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Storage error: {message}")


class ConfigurationError(RedirectServiceException):
    """Raised for invalid configuration (secrets, slug files)."""
    pass


class CodeGenerationError(ConfigurationError):
    """Raised when a generated code would exceed the start-parameter limit."""
    pass
