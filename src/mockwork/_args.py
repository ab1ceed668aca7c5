from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias, final

ParamDecl: TypeAlias = str | Mapping[str, Any] | tuple[str, Any]


@final
@dataclass(frozen=True, slots=True)
class Param:
    name: str
    default: Any = None


def parse_param(spec: ParamDecl) -> Param:
    if isinstance(spec, str):
        return Param(spec)

    if isinstance(spec, Mapping):
        if len(spec) != 1:
            raise TypeError(
                f"Parameter mapping must have exactly one entry, got {len(spec)}"
            )
        ((name, default),) = spec.items()
        return Param(name, default)

    if isinstance(spec, tuple) and len(spec) == 2 and isinstance(spec[0], str):
        return Param(spec[0], spec[1])

    raise TypeError(
        f"Parameter must be a name, a {{name: default}} mapping or a "
        f"(name, default) pair, got {spec!r}"
    )


@final
class Keywords(dict[str, Any]):
    """Keyword arguments recorded after the positional ones.

    Compares equal to a plain dict; the type tells it apart from a dict passed
    positionally.
    """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict.__repr__(self)})"


def process_args(
    args: tuple[Any, ...],
    kwargs: Mapping[str, Any],
    params: Sequence[Param],
    select: Sequence[int],
) -> Any:
    if len(select) == 1:
        index = select[0]
        if index < len(args):
            return args[index]
        if index < len(params):
            return kwargs.get(params[index].name)
        return None

    if params:
        named: dict[str, Any] = {}
        for index, param in enumerate(params):
            if select and index not in select:
                continue

            if index < len(args):
                named[param.name] = args[index]
            elif param.name in kwargs:
                named[param.name] = kwargs[param.name]
            else:
                named[param.name] = param.default

        if not select:
            declared = {param.name for param in params}
            for name, value in kwargs.items():
                if name not in declared:
                    named[name] = value

        return named

    if kwargs:
        return [*args, Keywords(kwargs)]
    return list(args)


def clone(value: Any) -> Any:
    # exact builtin containers only, everything else is kept by reference
    match value:
        case Keywords():
            return Keywords({key: clone(item) for key, item in value.items()})
        case dict() if type(value) is dict:
            return {key: clone(item) for key, item in value.items()}
        case list() if type(value) is list:
            return [clone(item) for item in value]
        case tuple() if type(value) is tuple:
            return tuple(clone(item) for item in value)
        case set() if type(value) is set:
            return {clone(item) for item in value}
        case _:
            return value
