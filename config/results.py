"""Uniform `{data, error}` result returned by service functions.

Views translate a failed result to an HTTP status via `http_status()`;
the websocket consumer sends `as_payload()` straight back to the client.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

VALIDATION = "validation"
PERMISSION_DENIED = "permission_denied"
NOT_FOUND = "not_found"
QUERY_FAILED = "query_failed"
UNEXPECTED = "unexpected"

_STATUS_BY_CODE = {
    VALIDATION: 400,
    PERMISSION_DENIED: 403,
    NOT_FOUND: 404,
    QUERY_FAILED: 500,
    UNEXPECTED: 500,
}


@dataclass(frozen=True)
class ServiceError:
    code: str
    message: str


@dataclass(frozen=True)
class Result(Generic[T]):
    data: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any = None) -> "Result":
        return cls(data=data)

    @classmethod
    def failure(cls, code: str, message: str) -> "Result":
        return cls(error=ServiceError(code=code, message=message))

    def http_status(self) -> int:
        if self.error is None:
            return 200
        return _STATUS_BY_CODE.get(self.error.code, 500)

    def as_payload(self, data: Any = None) -> dict:
        """Return the `{success, data}` / `{success, error, code}` wire shape.

        `data` overrides `self.data`, which lets views pass serialised output.
        """
        if self.error is not None:
            return {"success": False, "error": self.error.message, "code": self.error.code}
        return {"success": True, "data": self.data if data is None else data}
