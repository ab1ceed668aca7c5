from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any, Never, Self, TypeAlias, final

from mockwork._args import Param, ParamDecl, parse_param, process_args
from mockwork._builder import MockBuilder
from mockwork._state import MockState, Outcome, Overrides, RetHandler

Body: TypeAlias = Callable[["CallContext"], Any]


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class CallContext:
    """Everything a custom body gets to see about one invocation."""

    receiver: Any
    data: dict[Any, Any]
    call: int
    args: Any
    raw_args: tuple[Any, ...]
    raw_kwargs: dict[str, Any]
    original: Callable[..., Any] | None = None
    ret: Any = None
    # False when no return/throw outcome resolved for this call
    configured: bool = False


@final
@dataclass(frozen=False, kw_only=True, slots=True)
class FunctionOptions:
    body: Body | None = None
    params: tuple[Param, ...] = ()
    select: tuple[int, ...] = ()
    awaitable: bool = False
    original: Callable[..., Any] | None = None
    overrides: Overrides = field(default_factory=Overrides)

    def snapshot(self) -> FunctionOptions:
        return dataclasses.replace(self, overrides=self.overrides.copy())


def _pack(values: tuple[Any, ...]) -> Any:
    if not values:
        return None
    return values[0] if len(values) == 1 else values


def _throw_outcome(exception: BaseException | type[BaseException]) -> Outcome:
    if not (
        isinstance(exception, BaseException)
        or (isinstance(exception, type) and issubclass(exception, BaseException))
    ):
        raise TypeError(f"Can only throw exceptions, got {exception!r}")
    return Outcome(value=exception, raises=True)


@final
class FunctionBuilder(MockBuilder["FunctionMock"]):
    def __init__(self, body: Body | None = None) -> None:
        self._options = FunctionOptions(body=body)

    def params(self, *specs: ParamDecl) -> Self:
        self._options.params = tuple(parse_param(spec) for spec in specs)
        return self

    def select(self, *indexes: int) -> Self:
        self._options.select = indexes
        return self

    def awaitable(self) -> Self:
        self._options.awaitable = True
        return self

    def original(self, fn: Callable[..., Any] | None) -> Self:
        self._options.original = fn
        return self

    def ret(self, *values: Any, call: int | None = None) -> Self:
        self._options.overrides.set_return(Outcome.of(_pack(values)), call)
        return self

    def throw(
        self, exception: BaseException | type[BaseException], *, call: int | None = None
    ) -> Self:
        self._options.overrides.set_return(_throw_outcome(exception), call)
        return self

    def on_ret(self, handler: RetHandler, *, call: int | None = None) -> Self:
        self._options.overrides.set_handler(handler, call)
        return self

    @property
    def is_awaitable(self) -> bool:
        return self._options.awaitable

    def build(self, parent: Any = None, key: Hashable | None = None) -> FunctionMock:
        return FunctionMock(self._options.snapshot(), receiver=parent, key=key)


async def _resolved(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _rejected(exception: BaseException) -> Never:
    raise exception


@final
class FunctionMock:
    def __init__(
        self,
        options: FunctionOptions,
        receiver: Any = None,
        key: Hashable | None = None,
    ) -> None:
        self._options = options
        self._receiver = receiver
        self._key = key
        self._state = MockState(baseline=options.overrides, original=options.original)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.invoke(self._receiver, args, kwargs)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return BoundFunctionMock(self, instance)

    def __repr__(self) -> str:
        name = "" if self._key is None else f" {self._key!r}"
        return f"<{type(self).__name__}{name} calls={len(self._state.calls)}>"

    @property
    def original(self) -> Callable[..., Any] | None:
        return self._state.original

    @property
    def is_awaitable(self) -> bool:
        return self._options.awaitable

    def invoke(
        self, receiver: Any, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> Any:
        if not self._options.awaitable:
            return self._run(receiver, args, kwargs)

        # the call is recorded now, only delivery is deferred to the await
        try:
            result = self._run(receiver, args, kwargs)
        except BaseException as exc:
            return _rejected(exc)
        return _resolved(result)

    def _run(
        self, receiver: Any, raw_args: tuple[Any, ...], raw_kwargs: dict[str, Any]
    ) -> Any:
        state = self._state
        options = self._options

        call = state.record(
            process_args(raw_args, raw_kwargs, options.params, options.select)
        )
        args = state.calls[call]

        outcome = state.overrides.resolve(call, args)
        if outcome is not None and outcome.raises:
            raise outcome.value

        ret = None if outcome is None else outcome.value
        if options.body is None:
            return ret

        return options.body(
            CallContext(
                receiver=receiver,
                data=state.data,
                call=call,
                args=args,
                raw_args=raw_args,
                raw_kwargs=dict(raw_kwargs),
                original=state.original,
                ret=ret,
                configured=outcome is not None,
            )
        )

    def ret(self, *values: Any, call: int | None = None) -> None:
        self._state.overrides.set_return(Outcome.of(_pack(values)), call)

    def throw(
        self, exception: BaseException | type[BaseException], *, call: int | None = None
    ) -> None:
        self._state.overrides.set_return(_throw_outcome(exception), call)

    def on_ret(self, handler: RetHandler, *, call: int | None = None) -> None:
        self._state.overrides.set_handler(handler, call)

    def calls(self, call: int | None = None) -> Any:
        if call is None:
            return self._state.calls
        return self._state.call(call)

    def data(self, key: Hashable | None = None) -> Any:
        if key is None:
            return self._state.data
        return self._state.data.get(key)

    def reset(self) -> None:
        self._state.reset()


@final
class BoundFunctionMock:
    """A function mock read through an instance, invoked with it as receiver."""

    __slots__ = ("_mock", "_receiver")

    def __init__(self, mock: FunctionMock, receiver: Any) -> None:
        self._mock = mock
        self._receiver = receiver

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._mock.invoke(self._receiver, args, kwargs)

    def __getattr__(self, name: str) -> Any:
        if name in BoundFunctionMock.__slots__:
            raise AttributeError(name)
        return getattr(self._mock, name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundFunctionMock):
            return NotImplemented
        return self._mock is other._mock and self._receiver is other._receiver

    def __hash__(self) -> int:
        return hash((id(self._mock), id(self._receiver)))

    def __repr__(self) -> str:
        return f"<bound {self._mock!r} of {self._receiver!r}>"

    @property
    def mock(self) -> FunctionMock:
        return self._mock

    @property
    def receiver(self) -> Any:
        return self._receiver
