"""Turn client exception classes."""


class TurnError(Exception):
    """Base exception for all Turn client errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class InvalidArgumentError(TurnError):
    """Raised on bad caller input (empty URL or user, zero timestamp, no token)."""

    def __init__(self, message: str) -> None:
        super().__init__("INVALID_ARGUMENT", message)


class ConfigurationError(InvalidArgumentError):
    """Raised when the client configuration is invalid (e.g. a bad base URL)."""

    def __init__(self, message: str) -> None:
        TurnError.__init__(self, "INVALID_CONFIGURATION", message)


class TransportExhaustedError(TurnError):
    """Raised when every attempt failed with a retryable outcome."""

    def __init__(
        self,
        message: str,
        last_error: Exception | None = None,
        status_code: int | None = None,
        code: str = "TRANSPORT_EXHAUSTED",
    ) -> None:
        super().__init__(code, message)
        self.last_error = last_error
        self.status_code = status_code


class RequestTimeoutError(TransportExhaustedError):
    """Raised when the operation deadline expired before a usable response."""

    def __init__(
        self,
        message: str,
        last_error: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, last_error, status_code, code="TIMEOUT")


class RequestInterruptedError(TransportExhaustedError):
    """Raised when the caller cancelled the operation."""

    def __init__(
        self,
        message: str,
        last_error: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, last_error, status_code, code="INTERRUPTED")


class RemoteRejectedError(TurnError):
    """Raised on a non-200, non-retryable response."""

    def __init__(self, message: str, status_code: int, body_excerpt: str) -> None:
        super().__init__("REMOTE_REJECTED", message)
        self.status_code = status_code
        self.body_excerpt = body_excerpt


class MalformedResponseError(TurnError):
    """Raised when a 200 response cannot be decoded into a result."""

    def __init__(self, message: str) -> None:
        super().__init__("MALFORMED_RESPONSE", message)
