"""User-facing error messages and the client-side error hierarchy."""

QUOTA_EXCEEDED_MESSAGE = (
    "OpenAI API credit limit reached. "
    "Please try again later or contact the administrator."
)
PARSE_ERROR_MESSAGE = "Failed to parse server response."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
EMPTY_REPLY_MESSAGE = "No response returned from server."
NO_SPEECH_MESSAGE = "No speech was detected in the recording."
TIMEOUT_MESSAGE = "The request timed out. Please try again."

QUOTA_ERROR_CODE = "insufficient_quota"


class ChatClientError(Exception):
    """A failed proxy request, carrying the message shown to the user."""

    def __init__(self, message: str = UNKNOWN_ERROR_MESSAGE) -> None:
        super().__init__(message)
        self.user_message = message


class QuotaExceededError(ChatClientError):
    """The vendor rejected the call because of usage limits."""

    def __init__(self) -> None:
        super().__init__(QUOTA_EXCEEDED_MESSAGE)


class MalformedResponseError(ChatClientError):
    """The proxy answered with a body that is not valid JSON."""

    def __init__(self) -> None:
        super().__init__(PARSE_ERROR_MESSAGE)


class ProxyReportedError(ChatClientError):
    """The proxy answered with an application error."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConversationBusyError(RuntimeError):
    """Raised when a request is started while another one is in flight."""
