from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias, final

from mockwork._args import clone

RetHandler: TypeAlias = Callable[[Any], Any]

DEFAULT_CALL = None


@final
@dataclass(frozen=True, slots=True)
class Outcome:
    value: Any = None
    raises: bool = False

    @classmethod
    def of(cls, value: Any) -> Outcome:
        return cls(value=value, raises=isinstance(value, BaseException))


@final
@dataclass(frozen=False, kw_only=True, slots=True)
class Overrides:
    """Return/throw overrides and computed-return handlers by call index.

    The ``None`` key holds the default that applies to every call without an
    override of its own.
    """

    returns: dict[int | None, Outcome] = field(default_factory=dict)
    handlers: dict[int | None, RetHandler] = field(default_factory=dict)

    def copy(self) -> Overrides:
        return Overrides(returns=dict(self.returns), handlers=dict(self.handlers))

    def set_return(self, outcome: Outcome, call: int | None) -> None:
        self.returns[call] = outcome

    def set_handler(self, handler: RetHandler, call: int | None) -> None:
        self.handlers[call] = handler

    def resolve(self, call: int, args: Any) -> Outcome | None:
        for index in (call, DEFAULT_CALL):
            if index in self.returns:
                return self.returns[index]
            if index in self.handlers:
                return Outcome.of(self.handlers[index](args))
        return None


@final
@dataclass(frozen=False, kw_only=True, slots=True)
class MockState:
    baseline: Overrides
    overrides: Overrides = field(init=False)
    calls: list[Any] = field(default_factory=list)
    data: dict[Any, Any] = field(default_factory=dict)
    original: Callable[..., Any] | None = None

    def __post_init__(self) -> None:
        self.overrides = self.baseline.copy()

    def record(self, args: Any) -> int:
        self.calls.append(clone(args))
        return len(self.calls) - 1

    def call(self, index: int) -> Any:
        try:
            return self.calls[index]
        except IndexError:
            return None

    def reset(self) -> None:
        self.overrides = self.baseline.copy()
        self.calls = []
        self.data = {}
