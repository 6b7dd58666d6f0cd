"""Exception types raised by dlclient."""

from __future__ import annotations

from typing import Any


class DirectLineError(Exception):
    """Base exception for dlclient."""


class ConfigurationError(DirectLineError):
    """Invalid or missing configuration."""


class MissingSecretError(ConfigurationError):
    """Raised when the Direct Line secret is not set."""


class SchemaError(DirectLineError):
    """The API description is unusable or an operation call does not match it."""


class OperationError(DirectLineError):
    """An API operation returned a non-success status."""

    def __init__(self, operation_id: str, status: int, body: Any = None) -> None:
        super().__init__(f"{operation_id} failed with HTTP {status}: {body!r}")
        self.operation_id = operation_id
        self.status = status
        self.body = body


class BootstrapError(DirectLineError):
    """Session setup failed; the client cannot start."""

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"{step}: {cause}")
        self.step = step
        self.cause = cause
