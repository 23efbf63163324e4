"""Exceptions raised by the M-Pesa STK adapter"""


class MpesaError(Exception):
    """Base class for every error this package raises."""


class ConfigurationError(MpesaError, ValueError):
    """Required configuration is missing or invalid."""


class AuthenticationError(MpesaError):
    """The access token could not be obtained.

    The underlying failure is chained as ``__cause__``.
    """


class TransportError(MpesaError):
    """The STK push request failed on the wire or was rejected.

    ``detail`` holds the provider's error body when it sent one, otherwise
    a message describing the failure.
    """

    def __init__(self, detail, status_code: int | None = None):
        super().__init__(str(detail) if status_code is None else f"HTTP {status_code} - {detail}")
        self.detail = detail
        self.status_code = status_code


class MalformedCallbackError(MpesaError):
    """A callback payload is missing fields the provider always sends."""

    def __init__(self, message: str, missing: tuple[str, ...] = ()):
        super().__init__(message)
        self.missing = missing


class ProviderDeclinedError(MpesaError):
    """The provider reported a non-zero result code (cancelled, timed out, declined)."""

    def __init__(self, result_code: int, result_description: str, checkout_request_id: str | None = None):
        super().__init__(result_description)
        self.result_code = result_code
        self.result_description = result_description
        self.checkout_request_id = checkout_request_id
