"""Errors raised by the backend API client."""


class ApiError(Exception):
    """Structured error returned by the backend for a non-2xx response."""

    def __init__(  # noqa: PLR0913
        self,
        code: int,
        type: str,  # noqa: A002
        message: str,
        correlation_id: str = "",
        details: list[object] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.type = type
        self.message = message
        self.correlation_id = correlation_id
        self.details = details

    def __repr__(self) -> str:
        return (
            f"ApiError(code={self.code}, type={self.type!r}, "
            f"message={self.message!r}, correlation_id={self.correlation_id!r})"
        )


class UnauthorizedError(ApiError):
    """Raised after a 401 response once the stored token has been cleared."""

    def __init__(
        self, message: str = "Unauthorized", correlation_id: str = ""
    ) -> None:
        super().__init__(
            code=401,
            type="unauthorized",
            message=message,
            correlation_id=correlation_id,
        )
