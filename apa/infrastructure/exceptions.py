"""Infrastructure exceptions for external services (image host, auth provider).

They extend ApaException so presentation can map them to HTTP responses
consistently.
"""

from apa.domain.exceptions import ApaException


class ImageUploadError(ApaException):
    """The image host rejected the upload."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(
            f"Failed to upload image: {filename}",
            "IMAGE_UPLOAD_ERROR",
            {"filename": filename, "reason": reason},
        )


class AuthProviderError(ApaException):
    """The identity provider answered with an unexpected error (not bad credentials)."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Identity provider error during {operation}",
            "AUTH_PROVIDER_ERROR",
            {"operation": operation, "reason": reason},
        )
