from __future__ import annotations

import inspect
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Self, final

from mockwork._args import clone
from mockwork._builder import MockBuilder, is_builder
from mockwork._function import BoundFunctionMock, FunctionMock
from mockwork._object import ObjectMock, materialize, reset_member

CONSTRUCTOR = "__init__"
RESERVED = frozenset({"inst", "num_instances", "reset"})


@final
@dataclass(frozen=False, kw_only=True, slots=True)
class ClassState:
    """Per-instance descriptions indexed by construction order.

    ``descriptions`` is sparse: pre-configuring slot 2 does not create 0 or 1.
    ``num_instances`` only moves on construction.
    """

    members: dict[Hashable, Any]
    descriptions: dict[int, ObjectMock] = field(default_factory=dict)
    num_instances: int = 0
    static_mocks: dict[str, Any] = field(default_factory=dict)
    static_values: dict[str, Any] = field(default_factory=dict)

    def description(self, index: int) -> ObjectMock:
        if index not in self.descriptions:
            self.descriptions[index] = ObjectMock(self.members)
        return self.descriptions[index]


def _bind(value: Any, instance: Any) -> Any:
    if isinstance(value, FunctionMock):
        return BoundFunctionMock(value, instance)
    if inspect.isfunction(value):
        return value.__get__(instance, type(instance))
    return value


def description_of(instance: ClassMock) -> ObjectMock:
    state = type(instance)._mock_state
    description = state.descriptions.get(instance._mock_index)
    if description is None:
        raise AttributeError(
            f"Instance {instance._mock_index} of '{type(instance).__name__}' "
            f"has no description, was the class mock reset?"
        )
    return description


def _forward(key: str) -> property:
    def fget(self: ClassMock) -> Any:
        try:
            return _bind(description_of(self)[key], self)
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no member '{key}'"
            ) from None

    def fset(self: ClassMock, value: Any) -> None:
        description_of(self)[key] = value

    def fdel(self: ClassMock) -> None:
        try:
            del description_of(self)[key]
        except KeyError:
            raise AttributeError(key) from None

    return property(fget, fset, fdel)


def _forward_special(key: str) -> Callable[..., Any]:
    # implicit special method lookup skips properties, so dunders get a method
    def method(self: ClassMock, *args: Any, **kwargs: Any) -> Any:
        return _bind(description_of(self)[key], self)(*args, **kwargs)

    method.__name__ = key
    return method


def _static(value: Any) -> Any:
    if isinstance(value, FunctionMock) or inspect.isfunction(value):
        return staticmethod(value)
    return value


class ClassMock:
    """Base of every generated class mock.

    Instances hold nothing but their slot index; every member read or write is
    forwarded to the description in that slot.
    """

    _mock_state: ClassVar[ClassState]
    _mock_index: int

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        state = type(self)._mock_state
        index = state.num_instances
        description = state.description(index)
        self._mock_index = index

        if CONSTRUCTOR in description:
            constructor = _bind(description[CONSTRUCTOR], self)
            if callable(constructor):
                constructor(*args, **kwargs)

        state.num_instances += 1

    def __repr__(self) -> str:
        return f"<{type(self).__name__} instance {self._mock_index}>"

    @classmethod
    def inst(cls, index: int = 0) -> ObjectMock:
        return cls._mock_state.description(index)

    @classmethod
    def num_instances(cls) -> int:
        return cls._mock_state.num_instances

    @classmethod
    def reset(cls) -> None:
        state = cls._mock_state
        state.descriptions = {}
        state.num_instances = 0

        owner = _owner(cls)
        for key, mock in state.static_mocks.items():
            setattr(owner, key, _static(mock))
            reset_member(mock)
        for key, value in state.static_values.items():
            setattr(owner, key, _static(clone(value)))


def _owner(cls: type[ClassMock]) -> type[ClassMock]:
    # subclasses share the state, statics live on the generated class
    for klass in cls.__mro__:
        if "_mock_state" in vars(klass):
            return klass
    return cls


def _check_member(key: Hashable) -> None:
    if not isinstance(key, str):
        return
    if key in RESERVED or key.startswith("_mock_"):
        raise ValueError(f"'{key}' is reserved on class mocks")


@final
class ClassBuilder(MockBuilder[type[ClassMock]]):
    def __init__(self, members: Mapping[Hashable, Any]) -> None:
        for key in members:
            _check_member(key)
        self._members = dict(members)
        self._statics: tuple[str, ...] = ()
        self._name: str | None = None

    def static(self, *keys: str) -> Self:
        for key in keys:
            if key not in self._members:
                raise KeyError(f"Cannot mark unknown member '{key}' as static")
            if key == CONSTRUCTOR:
                raise ValueError("The constructor cannot be static")
        self._statics = keys
        return self

    def name(self, name: str) -> Self:
        self._name = name
        return self

    def build(self, parent: Any = None, key: Hashable | None = None) -> type[ClassMock]:
        _ = parent
        name = self._name or (key if isinstance(key, str) else "MockClass")

        instance_members = {
            member: value
            for member, value in self._members.items()
            if member not in self._statics
        }
        state = ClassState(members=instance_members)

        namespace: dict[str, Any] = {"_mock_state": state}
        for member in instance_members:
            # non-string keys are only reachable through the descriptions
            if not isinstance(member, str) or member == CONSTRUCTOR:
                continue
            if member.startswith("__") and member.endswith("__"):
                namespace[member] = _forward_special(member)
            else:
                namespace[member] = _forward(member)

        mock_class = type(name, (ClassMock,), namespace)

        for member in self._statics:
            built = materialize(self._members, member, mock_class)
            setattr(mock_class, member, _static(built))
            if is_builder(self._members[member]):
                state.static_mocks[member] = built
            else:
                state.static_values[member] = clone(self._members[member])

        return mock_class
