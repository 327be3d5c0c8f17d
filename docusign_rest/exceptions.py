"""
DocuSign Client Exceptions

Errors raised by the library itself. Transport failures from requests
(connection errors, timeouts, TLS failures) are never wrapped, and remote
API error payloads are returned to the caller rather than raised.
"""


class DocuSignError(Exception):
    """Base exception for all errors raised by this library."""
    pass


class ConfigurationError(DocuSignError):
    """
    Raised when client configuration is unusable.
    
    This includes a CA bundle path that does not exist, an unknown
    credential format, or a configuration file that is not a mapping.
    """
    pass


class ValidationError(DocuSignError):
    """
    Raised when request input fails local validation.
    
    Always raised before any network call is made.
    """
    def __init__(self, message: str, field: str = None, index: int = None):
        self.field = field
        self.index = index
        super().__init__(message)
