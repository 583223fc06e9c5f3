"""Error taxonomy for the dispatch pipeline and the text shown to users."""

from enum import Enum


class ErrorKind(str, Enum):
    CLASSIFICATION_SKIP = "classification-skip"
    CONCURRENT_DUPLICATE = "concurrent-duplicate"
    CONTEXT_DEGRADED = "context-degraded"
    EXTERNAL_TIMEOUT = "external-timeout"
    EXTERNAL_FAILURE = "external-failure"
    DELIVERY_FAILURE = "delivery-failure"


# Failure reasons derived from the task's diagnostic output
REASON_NOT_FOUND = "not-found"
REASON_PERMISSION = "permission-denied"
REASON_NETWORK = "network-error"
REASON_RATE_LIMIT = "rate-limited"
REASON_EMPTY = "empty-response"
REASON_GENERIC = "execution-failed"

# (reason, substrings) checked in order against lowercased diagnostics
_REASON_PATTERNS = (
    (REASON_NOT_FOUND, ("command not found", "not found", "no such file", "enoent")),
    (REASON_PERMISSION, ("permission denied", "permission", "eacces", "eperm")),
    (REASON_RATE_LIMIT, ("rate limit", "rate_limit", "quota", "usage limit", "too many requests", "429")),
    (REASON_NETWORK, ("network", "econnrefused", "econnreset", "connection", "enotfound", "getaddrinfo")),
)


def classify_failure(diagnostic: str) -> str:
    """Map stderr (or an exception message) to a failure reason."""
    text = (diagnostic or "").lower()
    for reason, needles in _REASON_PATTERNS:
        if any(n in text for n in needles):
            return reason
    return REASON_GENERIC


class RelayError(Exception):
    """Base class for errors that end in a user notification."""

    kind: ErrorKind = ErrorKind.EXTERNAL_FAILURE


class ExternalTimeout(RelayError):
    kind = ErrorKind.EXTERNAL_TIMEOUT

    def __init__(self, seconds: float):
        super().__init__(f"External task timed out after {seconds:g}s")
        self.seconds = seconds


class ExternalFailure(RelayError):
    kind = ErrorKind.EXTERNAL_FAILURE

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(f"External task failed ({reason})")
        self.reason = reason
        self.detail = detail


class DeliveryFailure(RelayError):
    kind = ErrorKind.DELIVERY_FAILURE

    def __init__(self, index: int, cause: BaseException):
        super().__init__(f"Delivery of chunk {index} failed: {cause}")
        self.index = index
        self.cause = cause


TIMEOUT_MESSAGE = (
    "Sorry, generating a response took too long and was stopped "
    "({minutes} min limit). Please try a shorter or simpler request."
)
FAILURE_MESSAGE = (
    "Sorry, something went wrong while generating a response. "
    "Please try again in a little while."
)
DELIVERY_MESSAGE = (
    "Sorry, I couldn't post the full response. Please try again."
)


def user_message_for(error: BaseException) -> str:
    """Text shown in the channel for an error. Diagnostic detail is never included."""
    if isinstance(error, ExternalTimeout):
        minutes = max(1, round(error.seconds / 60))
        return TIMEOUT_MESSAGE.format(minutes=minutes)
    if isinstance(error, DeliveryFailure):
        return DELIVERY_MESSAGE
    return FAILURE_MESSAGE
