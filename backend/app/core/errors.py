from enum import Enum
from typing import Generic, Optional, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel
from starlette import status

T = TypeVar("T")


class InvalidArgument(ValueError):
    """
    Raised for caller-contract violations (e.g. an empty name list).
    Only local input validation raises; network-facing code never does.
    """


class ErrorKind(str, Enum):
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    MALFORMED_RESPONSE = "malformed_response"


class Result(BaseModel, Generic[T]):
    """
    Outcome of an upstream call. Failures carry an ErrorKind instead of raising,
    so callers can degrade to an empty result.
    """
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str = "") -> "Result[T]":
        return cls(error=error, detail=detail)

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok and self.value is not None else default


class ValidationException(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail
        )
