from __future__ import annotations

import inspect
from collections.abc import Sequence
from typing import Any, final

from mockwork._args import ParamDecl
from mockwork._class import ClassMock, description_of
from mockwork._function import Body, CallContext, FunctionBuilder, FunctionMock
from mockwork._object import ObjectMock

_MISSING = object()


def _call_through(target: Any, stored: Any) -> Body:
    def body(context: CallContext) -> Any:
        if context.configured:
            return context.ret

        original = context.original
        if original is None:
            raise TypeError("Spy has no original implementation to call through to")
        # installed on a class and read through one of its instances
        if context.receiver is not target and hasattr(stored, "__get__"):
            original = stored.__get__(context.receiver, type(context.receiver))

        return original(*context.raw_args, **context.raw_kwargs)

    return body


def _capture(target: Any, key: str, original: Any) -> tuple[Any, bool]:
    """Return the attribute as stored on ``target`` and whether restoring it
    means assigning it back (``True``) or dropping the shadowing attribute."""
    if isinstance(target, ObjectMock) and key in target:
        return target[key], True

    if isinstance(target, ClassMock) and key in description_of(target):
        return description_of(target)[key], True

    stored = inspect.getattr_static(target, key, _MISSING)
    if stored is _MISSING:
        # served by __getattr__, the spy shadows it until restored
        return original, False

    if key in getattr(target, "__dict__", {}):
        return stored, True

    if not isinstance(target, type) and hasattr(type(stored), "__set__"):
        # data descriptor: writes go through it, so write the value back
        return original, True

    return stored, False


@final
class Spy:
    """Handle for a spied attribute, able to put the original back."""

    def __init__(
        self,
        target: Any,
        key: str,
        mock: FunctionMock,
        original: Any,
        stored: Any,
        owned: bool,
    ) -> None:
        self._target = target
        self._key = key
        self._mock = mock
        self._original = original
        self._stored = stored
        self._owned = owned
        self._restored = False

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return getattr(self._target, self._key)(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )
        return getattr(self._mock, name)

    def __enter__(self) -> Spy:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        _ = exc_type, exc_val, exc_tb
        self.restore()

    @property
    def mock(self) -> FunctionMock:
        return self._mock

    @property
    def target(self) -> Any:
        return self._target

    @property
    def key(self) -> str:
        return self._key

    @property
    def original(self) -> Any:
        return self._original

    @property
    def restored(self) -> bool:
        return self._restored

    def restore(self) -> None:
        if self._restored:
            return

        if self._owned:
            setattr(self._target, self._key, self._stored)
        else:
            # the original was inherited, drop the shadowing attribute
            delattr(self._target, self._key)

        self._restored = True


def spy(
    target: Any,
    key: str,
    replacement: FunctionBuilder | Body | None = None,
    *,
    params: Sequence[ParamDecl] = (),
) -> Spy:
    original = getattr(target, key)
    if not callable(original):
        raise TypeError(f"Cannot spy on non-callable attribute '{key}' of {target!r}")

    stored, owned = _capture(target, key, original)

    if replacement is None:
        builder = FunctionBuilder(_call_through(target, stored))
        if inspect.iscoroutinefunction(original):
            builder.awaitable()
    elif isinstance(replacement, FunctionBuilder):
        builder = replacement
    else:
        builder = FunctionBuilder(replacement).params(*params)

    mock = builder.original(original).build(target, key)
    setattr(target, key, mock)

    return Spy(target, key, mock, original, stored, owned)
