"""Error taxonomy shared by the listing and creation paths."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Stable error codes returned to clients instead of driver messages."""

    STORE_READ_FAILED = "STORE_READ_FAILED"
    STORE_WRITE_FAILED = "STORE_WRITE_FAILED"


class ErrorDetail(BaseModel):
    """Client-facing description of a store failure."""

    code: ErrorCode
    message: str


class UpstreamStoreError(Exception):
    """A catalog store (database) operation failed.

    The original driver exception is chained as ``__cause__`` and only ever
    logged; callers surface :meth:`detail` instead.
    """

    def __init__(self, operation: str, code: ErrorCode = ErrorCode.STORE_READ_FAILED):
        super().__init__(f"Catalog store operation '{operation}' failed")
        self.operation = operation
        self.code = code

    def detail(self) -> ErrorDetail:
        return ErrorDetail(code=self.code, message=str(self))
