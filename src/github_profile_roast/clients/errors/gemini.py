from enum import Enum

from github_profile_roast.clients.errors.base import ClientError, ExtraInfoType


class GenerationErrorKind(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONTENT_BLOCKED = "content_blocked"
    RATE_LIMIT_EXHAUSTED = "rate_limit_exhausted"
    BAD_REQUEST = "bad_request"
    ACCESS_FORBIDDEN = "access_forbidden"
    SERVER_ERROR = "server_error"
    MALFORMED_RESPONSE = "malformed_response"


class GenerationError(ClientError):
    """A classified failure from the Gemini client."""

    kind: GenerationErrorKind

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        super().__init__(message=message, extra_info=extra_info)


class GenerationNotConfiguredError(GenerationError):
    """No Gemini API key is configured."""

    kind = GenerationErrorKind.UNCONFIGURED

    def __init__(self):
        super().__init__(message="Gemini API key not configured. Set GOOGLE_API_KEY or GEMINI_API_KEY.")


class ContentBlockedError(GenerationError):
    """The content was blocked by the safety filters or a recitation check."""

    kind = GenerationErrorKind.CONTENT_BLOCKED

    def __init__(self, reason: str):
        self.reason: str = reason
        super().__init__(message="Content was blocked by Gemini.", extra_info={"reason": reason})


class RateLimitExhaustedError(GenerationError):
    """Every attempt was rate limited."""

    kind = GenerationErrorKind.RATE_LIMIT_EXHAUSTED

    def __init__(self, attempts: int):
        self.attempts: int = attempts
        super().__init__(message="Failed to generate content due to rate limiting.", extra_info={"attempts": str(attempts)})


class BadRequestError(GenerationError):
    """Gemini rejected the request as malformed (HTTP 400)."""

    kind = GenerationErrorKind.BAD_REQUEST

    def __init__(self, message: str | None = None):
        super().__init__(message="Bad request to Gemini API.", extra_info={"message": message})


class AccessForbiddenError(GenerationError):
    """Gemini refused the API key (HTTP 403)."""

    kind = GenerationErrorKind.ACCESS_FORBIDDEN

    def __init__(self, message: str | None = None):
        super().__init__(message="Gemini API access forbidden, check the API key.", extra_info={"message": message})


class GenerationServerError(GenerationError):
    """Any other non-2xx response, or a transport failure when there is no status code."""

    kind = GenerationErrorKind.SERVER_ERROR

    def __init__(self, status_code: int | None, message: str | None = None):
        self.status_code: int | None = status_code
        super().__init__(
            message="Gemini API error.",
            extra_info={"status_code": str(status_code) if status_code is not None else None, "message": message},
        )


class MalformedResponseError(GenerationError):
    """A 2xx response that carried no usable generated text."""

    kind = GenerationErrorKind.MALFORMED_RESPONSE

    def __init__(self, message: str):
        super().__init__(message="Invalid response from Gemini API.", extra_info={"message": message})
