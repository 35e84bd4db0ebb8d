"""Error taxonomy signalled by the diagram store.

Three kinds reach callers:
- NotFoundError: the referenced root or file does not exist
- BadRequestError: a policy violation against an otherwise valid-looking target
- InternalServerError: an unexpected I/O failure, with the original attached
"""

from __future__ import annotations

from typing import Any


class StoreError(Exception):
    """Base error for the diagram store."""

    status_code: int = 500

    def __init__(self, message: str, *, additional_information: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.additional_information = additional_information

    def __str__(self) -> str:
        return self.message


class NotFoundError(StoreError):
    """Raised when a root directory or diagram file does not exist."""

    status_code = 404


class BadRequestError(StoreError):
    """Raised when a request violates a storage policy."""

    status_code = 400


class InternalServerError(StoreError):
    """Raised when an underlying filesystem operation fails unexpectedly."""

    status_code = 500
