from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import Any, Generic, TypeVar

M = TypeVar("M")


class MockBuilder(ABC, Generic[M]):
    """Accumulates configuration and produces a live mock.

    ``parent`` and ``key`` are given when the mock is built as a member of a
    container; the builder never stores the result on the parent itself.
    """

    @abstractmethod
    def build(self, parent: Any = None, key: Hashable | None = None) -> M: ...


def is_builder(value: Any) -> bool:
    return isinstance(value, MockBuilder)


def create(builder: MockBuilder[M]) -> M:
    return builder.build()
