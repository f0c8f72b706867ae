"""
Exception taxonomy for the authentication core.

Each error carries the HTTP status it is surfaced as and the message the
caller is allowed to see. Token failures all share the same public message
so callers cannot tell an expired token from a forged one.
"""
from fastapi import status


class AuthError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)


class ValidationError(AuthError):
    """A required field was missing or empty."""
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "All fields are required"


class DuplicateEmailError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Email already registered"


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password; the two cases are indistinguishable."""
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Invalid credentials"


class InvalidTokenError(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Invalid token"


class InvalidSignatureError(InvalidTokenError):
    pass


class TokenExpiredError(InvalidTokenError):
    pass


class MalformedTokenError(InvalidTokenError):
    pass


class NoAuthHeaderError(InvalidTokenError):
    public_message = "No token provided"


class ServerFaultError(AuthError):
    """Storage or signing failure. The message is logged, never returned."""
