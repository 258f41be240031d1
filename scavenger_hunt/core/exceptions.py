from fastapi import status


class ScavengerHuntError(Exception):
    """Base class for errors the API reports to callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Internal server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def detail(self) -> str:
        # 5xx errors never leak upstream or storage details
        if self.status_code >= 500:
            return self.public_message
        return self.message


class ValidationError(ScavengerHuntError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid input"


class ImageNotFound(ValidationError):
    public_message = "Image file not found"


class NotFoundError(ScavengerHuntError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not found"


class ConflictError(ScavengerHuntError):
    status_code = status.HTTP_409_CONFLICT
    public_message = "Conflict"


class HintsDisabledError(ScavengerHuntError):
    status_code = status.HTTP_403_FORBIDDEN
    public_message = "Hints are not enabled for this question"


class HintLimitReachedError(ScavengerHuntError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    public_message = "Maximum hints reached for this question"


class OracleUnavailable(ScavengerHuntError):
    """The scoring model could not be reached or returned nothing usable."""


class StorageError(ScavengerHuntError):
    """A database write failed; the transaction was rolled back."""
