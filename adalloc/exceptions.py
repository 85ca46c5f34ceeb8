"""
Custom exception hierarchy for AdAlloc.

Exception Hierarchy:
    AdAllocError (base)
    ├── RecommendationError              - AI strategist failures
    │   ├── RecommendationConnectionError  - Network/timeout issues (recoverable)
    │   ├── RecommendationAPIError         - Provider returned an error response
    │   ├── RecommendationDataError        - Reply has an unexpected structure
    │   └── RecommendationUnavailableError - No provider configured
    └── EntityNotFoundError              - Unknown customer/campaign/channel/goal id

    ValidationError                      - Input validation failed
"""


class AdAllocError(Exception):
    """Base exception for all AdAlloc errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class RecommendationError(AdAllocError):
    """Base class for recommendation service failures."""


class RecommendationConnectionError(RecommendationError):
    """
    Network-related errors (timeout, connection refused, etc.).

    These are typically recoverable by trying again later.
    """

    def __init__(self, message: str, details: str = None, retry_after: int = None):
        super().__init__(message, details)
        self.retry_after = retry_after


class RecommendationAPIError(RecommendationError):
    """
    Provider returned an error response.

    Check status_code for specifics.
    """

    def __init__(self, message: str, details: str = None, status_code: int = None):
        super().__init__(message, details)
        self.status_code = status_code


class RecommendationDataError(RecommendationError):
    """
    Reply could not be parsed into a recommendation.

    Either the text was not JSON or required fields were missing/invalid.
    """

    def __init__(self, message: str, details: str = None, expected: str = None, got: str = None):
        super().__init__(message, details)
        self.expected = expected
        self.got = got


class RecommendationUnavailableError(RecommendationError):
    """No recommendation provider is configured."""


class EntityNotFoundError(AdAllocError):
    """Lookup by id found nothing."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found", entity_id)


class ValidationError(Exception):
    """
    Input validation failed.

    Used for validating user input before it reaches the data tree.
    """

    def __init__(self, field: str, message: str, value: any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"
