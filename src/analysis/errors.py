"""
Error taxonomy for the analysis pipeline.

Generation and text-acquisition failures are raised by their components
and reach callers wrapped in AnalysisFailedError.
"""
from typing import Optional


class ContractAnalysisError(Exception):
    """Base class for every pipeline failure."""


# -------------------------------------------------
# Generation client
# -------------------------------------------------

class GenerationError(ContractAnalysisError):
    """Raised when the generation service call fails."""


class NotConfiguredError(GenerationError):
    def __init__(self, message: str = "OpenAI API key not configured"):
        super().__init__(message)


class InvalidCredentialError(GenerationError):
    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message)


class RateLimitedError(GenerationError):
    """
    A single rate-limited attempt. Consumed by the retry loop.

    retry_after_ms carries the service's retry hint when one was sent.
    """

    def __init__(self, retry_after_ms: Optional[int] = None):
        self.retry_after_ms = retry_after_ms
        hint = f" (retry after {retry_after_ms}ms)" if retry_after_ms else ""
        super().__init__(f"Rate limit exceeded{hint}")


class RateLimitExhaustedError(GenerationError):
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("OpenAI rate limit reached. Please wait and try again.")


class ModelUnavailableError(GenerationError):
    def __init__(self, model: str):
        self.model = model
        super().__init__(f"{model} is not available for this API key")


class MalformedRequestError(GenerationError):
    def __init__(self, detail: str = "Unknown error"):
        super().__init__(f"Invalid request: {detail}")


class TransportError(GenerationError):
    def __init__(self, detail: str = "Connection error"):
        super().__init__(f"Network error: {detail}")


class UnknownServiceError(GenerationError):
    def __init__(self, status_code: Optional[int], detail: str = "Unknown error"):
        self.status_code = status_code
        super().__init__(f"API error: {status_code} - {detail}")


# -------------------------------------------------
# Text acquisition
# -------------------------------------------------

class TextAcquisitionError(ContractAnalysisError):
    """Raised when a URL cannot be turned into usable text."""


class FetchError(TextAcquisitionError):
    def __init__(self, url: str, status_code: Optional[int] = None, detail: str = ""):
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            message = f"Failed to fetch {url}: HTTP {status_code}"
        else:
            message = f"Failed to fetch {url}: {detail or 'request failed'}"
        super().__init__(message)


class ExtractionError(TextAcquisitionError):
    def __init__(self, url: str, length: int, minimum: int):
        self.url = url
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Extracted text from {url} is too short ({length} < {minimum} characters). "
            "Paste the terms text instead."
        )


# -------------------------------------------------
# Top-level surface
# -------------------------------------------------

class AnalysisFailedError(ContractAnalysisError):
    """
    Single error surface for callers.

    The original failure stays reachable through .cause (and __cause__);
    .kind names its type for diagnostics.
    """

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Analysis failed: {cause}")

    @property
    def kind(self) -> str:
        return type(self.cause).__name__
