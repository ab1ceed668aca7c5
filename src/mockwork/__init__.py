from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any

from mockwork._args import Keywords, Param, clone
from mockwork._builder import MockBuilder, create
from mockwork._class import CONSTRUCTOR, ClassBuilder, ClassMock
from mockwork._function import (
    Body,
    BoundFunctionMock,
    CallContext,
    FunctionBuilder,
    FunctionMock,
)
from mockwork._object import ObjectBuilder, ObjectMock, Resettable, own_keys
from mockwork._spy import Spy, spy

__all__ = [
    "CONSTRUCTOR",
    "BoundFunctionMock",
    "CallContext",
    "ClassBuilder",
    "ClassMock",
    "FunctionBuilder",
    "FunctionMock",
    "Keywords",
    "MockBuilder",
    "ObjectBuilder",
    "ObjectMock",
    "Resettable",
    "Param",
    "Spy",
    "clone",
    "create",
    "mock_class",
    "mock_function",
    "mock_object",
    "own_keys",
    "spy",
]


def mock_function(body: Body | None = None) -> FunctionBuilder:
    return FunctionBuilder(body)


def mock_object(members: Mapping[Hashable, Any]) -> ObjectBuilder:
    return ObjectBuilder(members)


def mock_class(members: Mapping[Hashable, Any]) -> ClassBuilder:
    return ClassBuilder(members)
