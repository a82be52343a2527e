from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .errors import WorkflowError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: WorkflowError


# Each workflow stage hands one of these to the next instead of raising.
Result = Union[Ok, Err]
