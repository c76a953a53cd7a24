"""Error taxonomy for provider and aggregation failures."""

from enum import Enum


class ErrorKind(Enum):
    """Kinds of failures surfaced by the food data layer."""

    TIMEOUT = "timeout"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PARSE_FAILURE = "parse_failure"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    INTERNAL_ERROR = "internal_error"


class ProviderError(Exception):
    """Recoverable failure raised by a provider adapter."""

    def __init__(
        self,
        kind: ErrorKind,
        provider: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.provider = provider
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"ProviderError(kind={self.kind.value}, provider={self.provider}, "
            f"status={self.status_code}, message={self.message!r})"
        )


class InvalidInputError(ValueError):
    """Raised when caller input cannot be interpreted (e.g. malformed ids)."""

    kind = ErrorKind.INVALID_INPUT
