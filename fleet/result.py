"""Tagged results returned by the store, object storage and other collaborators."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(Enum):
    """Failure categories. Value = HTTP status the web layer answers with."""

    VALIDATION = 400
    NOT_FOUND = 404
    STORAGE = 500
    UPSTREAM = 502


class FleetError(Exception):
    """Raised by Result.unwrap() on an Err."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ""

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise FleetError(self.kind, self.message)


Result = Union[Ok, Err]
