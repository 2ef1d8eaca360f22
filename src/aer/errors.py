"""
Error types for Aer.

Every failure of an upload or search surfaces as an AerError subclass.
Decryption failures are not errors: decrypt() returns None instead.
"""


class AerError(Exception):
    """Base class for all Aer failures."""


class MissingContentError(AerError, ValueError):
    """Normalized payload has no content, plaintext or encryptedContent."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message or 'Payload must contain either "content", "plaintext", or "encryptedContent"'
        )


class UnauthenticatedError(AerError):
    """No auth token is configured."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "No authentication token configured. Set AER_TOKEN or add token to config.toml"
        )


class InvalidTokenFormatError(AerError, ValueError):
    """Auth token does not follow the aer_{userId} format."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Invalid token format; expected aer_{userId}")


class NetworkError(AerError):
    """Transport-level failure talking to the Aer API."""


class UploadFailedError(AerError):
    """Upload endpoint answered with a non-success status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Upload failed ({status}): {body}")


class SearchFailedError(AerError):
    """Every search endpoint candidate failed."""

    def __init__(self, last_error: Exception | str | None = None):
        self.last_error = last_error
        super().__init__(str(last_error) if last_error else "Semantic search failed")
