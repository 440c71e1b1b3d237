"""Normalized vendor failures raised by the request executor."""

GENERIC_VENDOR_MESSAGE = "Error communicating with OpenAI"
INVALID_RESPONSE_MESSAGE = "Invalid response from OpenAI"
TIMEOUT_MESSAGE = "Request to OpenAI timed out"
QUOTA_ERROR_CODE = "insufficient_quota"


class VendorError(Exception):
    """A vendor call failed with a status that should reach the caller.

    Attributes:
        status_code: HTTP status to answer with.
        message: Human-readable message, passed through to the end user.
        code: Machine-readable vendor code, e.g. ``insufficient_quota``.
    """

    def __init__(
        self,
        status_code: int,
        message: str = GENERIC_VENDOR_MESSAGE,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code

    @property
    def is_quota_exceeded(self) -> bool:
        return self.status_code == 429 or self.code == QUOTA_ERROR_CODE


class InvalidVendorResponseError(VendorError):
    """The vendor answered successfully but without the expected field."""

    def __init__(self) -> None:
        super().__init__(500, INVALID_RESPONSE_MESSAGE)


class VendorTimeoutError(VendorError):
    """The vendor did not answer within the configured bound."""

    def __init__(self) -> None:
        super().__init__(504, TIMEOUT_MESSAGE)
