"""Typed service results.

Data-layer failures (a missing environment data key, template, environment or
user) are returned to the caller instead of raised, so routers decide how to
map them onto HTTP responses.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Generic, Optional, TypeVar

from fastapi import HTTPException

T = TypeVar("T")


class StatusCodes(IntEnum):
    OK = 200
    Created = 201
    BadRequest = 400
    Unauthorized = 401
    NotFound = 404
    Conflict = 409


@dataclass
class DataReturn(Generic[T]):
    data: Optional[T] = None
    status_code: Optional[StatusCodes] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code is None or self.status_code < 400

    @classmethod
    def not_found(cls, error: str) -> "DataReturn[T]":
        return cls(status_code=StatusCodes.NotFound, error=error)

    @classmethod
    def bad_request(cls, error: str) -> "DataReturn[T]":
        return cls(status_code=StatusCodes.BadRequest, error=error)


def unwrap(result: DataReturn[T]) -> Optional[T]:
    """Return the result data or raise the matching HTTPException (router use only)"""
    if not result.ok:
        raise HTTPException(status_code=int(result.status_code), detail=result.error)
    return result.data
