"""
Tagged results for operations backed by the text-generation service.

Every such operation resolves to a value. ``Ok`` means the value came from the
service; ``Fallback`` means a documented default was substituted, and
``reason`` says why (``service_unavailable``, ``malformed_output``,
``low_confidence``, ...).
"""
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class Fallback(Generic[T]):
    value: T
    reason: str

    @property
    def is_fallback(self) -> bool:
        return True


Result = Union[Ok[T], Fallback[T]]
