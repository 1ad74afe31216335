"""
Custom application-specific exceptions.
"""

class BaseAppException(Exception):
    """Base exception for the application."""
    pass

class AIClientError(BaseAppException):
    """Raised for errors related to the AI client."""
    pass

class InvalidFileTypeError(BaseAppException):
    """Raised for unsupported file types."""
    pass

class ParsingError(BaseAppException):
    """Raised when parsing AI output fails."""
    pass

class ChatRelayError(BaseAppException):
    """Raised by the chat client when a relay request fails."""
    pass

class UploadTooLargeError(BaseAppException):
    """Raised when an upload exceeds the configured size limit."""
    pass
