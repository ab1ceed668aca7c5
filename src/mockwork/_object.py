from __future__ import annotations

from collections.abc import Hashable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, final, runtime_checkable

from mockwork._args import clone
from mockwork._builder import MockBuilder, is_builder


def materialize(members: Mapping[Hashable, Any], key: Hashable, parent: Any) -> Any:
    """Build the member under ``key`` for ``parent``: nested builders are
    built in place, plain values are cloned so parents never share them."""
    value = members[key]
    if is_builder(value):
        return value.build(parent, key)
    return clone(value)


@runtime_checkable
class Resettable(Protocol):
    def reset(self) -> None: ...


def reset_member(value: Any) -> None:
    if isinstance(value, Resettable) and callable(value.reset):
        value.reset()


@final
@dataclass(frozen=True, slots=True)
class Snapshot:
    mocks: dict[Hashable, Any]
    values: dict[Hashable, Any]


@final
class ObjectMock:
    __slots__ = ("_members", "_snapshot")

    def __init__(self, members: Mapping[Hashable, Any]) -> None:
        if "reset" in members:
            raise ValueError("'reset' is reserved on object mocks")

        built: dict[Hashable, Any] = {}
        object.__setattr__(self, "_members", built)

        mocks: dict[Hashable, Any] = {}
        values: dict[Hashable, Any] = {}
        for key, value in members.items():
            built[key] = materialize(members, key, self)
            if is_builder(value):
                mocks[key] = built[key]
            else:
                values[key] = clone(value)

        object.__setattr__(self, "_snapshot", Snapshot(mocks=mocks, values=values))

    def __getattr__(self, name: str) -> Any:
        try:
            return object.__getattribute__(self, "_members")[name]
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no member '{name}'"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._members[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._members[name]
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no member '{name}'"
            ) from None

    def __getitem__(self, key: Hashable) -> Any:
        return self._members[key]

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self._members[key] = value

    def __delitem__(self, key: Hashable) -> None:
        del self._members[key]

    def __contains__(self, key: object) -> bool:
        return key in self._members

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._members))

    def __repr__(self) -> str:
        keys = ", ".join(repr(key) for key in self._members)
        return f"{type(self).__name__}({keys})"

    def reset(self) -> None:
        snapshot = self._snapshot
        for key in list(self._members):
            if key in snapshot.mocks:
                self._members[key] = snapshot.mocks[key]
                reset_member(snapshot.mocks[key])
            elif key in snapshot.values:
                self._members[key] = clone(snapshot.values[key])
            else:
                del self._members[key]


def own_keys(target: Any) -> list[Hashable]:
    """Every key of ``target``, string or not, in insertion order."""
    if isinstance(target, ObjectMock):
        return list(target)
    if isinstance(target, Mapping):
        return list(target.keys())
    return list(vars(target))


@final
class ObjectBuilder(MockBuilder[ObjectMock]):
    def __init__(self, members: Mapping[Hashable, Any]) -> None:
        self._members = dict(members)

    def build(self, parent: Any = None, key: Hashable | None = None) -> ObjectMock:
        _ = parent, key
        return ObjectMock(self._members)
