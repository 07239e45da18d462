"""Strict decoding of a flat configuration mapping into a frozen dataclass."""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from remote_state._errors import DecodeError

if TYPE_CHECKING:
    from remote_state._types import ConfigMap

T = TypeVar("T")

_NONE_TYPE = type(None)


def field_key(f: dataclasses.Field[Any]) -> str:
    """Return the source mapping key for a dataclass field."""
    return str(f.metadata.get("key", f.name))


def decoded_keys(cls: type) -> tuple[str, ...]:
    """Return the source keys ``decode()`` reads for ``cls``, in field order."""
    return tuple(field_key(f) for f in dataclasses.fields(cls) if f.init and f.metadata.get("decode", True))


def decode(cls: type[T], config: ConfigMap, *, backend: str | None = None) -> T:
    """Decode ``config`` into an instance of the dataclass ``cls``.

    Unknown keys are ignored. Missing keys and ``None`` values keep the
    field default. Values are never weakly converted: a string is not
    accepted where a bool is declared.

    :param cls: A dataclass type.
    :param config: The flat source mapping.
    :param backend: Provider type, attached to raised errors.
    :raises DecodeError: If a known key holds a value of the wrong shape.
    """
    hints = typing.get_type_hints(cls)
    kwargs: dict[str, object] = {}
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if not f.init or not f.metadata.get("decode", True):
            continue
        key = field_key(f)
        value = config.get(key)
        if value is None:
            continue
        kwargs[f.name] = _convert(key, value, hints[f.name], backend)
    return cls(**kwargs)


def _convert(key: str, value: object, hint: Any, backend: str | None) -> object:
    origin = typing.get_origin(hint)
    args = typing.get_args(hint)

    if origin is typing.Union or (origin is not None and _NONE_TYPE in args):
        # Optional[X] / X | None: the value is known to be non-None here.
        non_none = [a for a in args if a is not _NONE_TYPE]
        if len(non_none) == 1:
            return _convert(key, value, non_none[0], backend)

    if hint is bool:
        if isinstance(value, bool):
            return value
        raise _mismatch(key, value, "bool", backend)
    if hint is str:
        if isinstance(value, str):
            return value
        raise _mismatch(key, value, "str", backend)
    if hint is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise _mismatch(key, value, "int", backend)
    if hint is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise _mismatch(key, value, "float", backend)
    if origin is dict or hint is dict:
        if not isinstance(value, Mapping):
            raise _mismatch(key, value, "mapping", backend)
        if args == (str, str):
            for k, v in value.items():
                if not isinstance(k, str) or not isinstance(v, str):
                    raise _mismatch(key, value, "mapping of str to str", backend)
        return dict(value)
    if origin is list or hint is list:
        if not isinstance(value, (list, tuple)):
            raise _mismatch(key, value, "list", backend)
        return list(value)
    if hint is object or hint is Any:
        return value
    raise TypeError(f"Unsupported field type {hint!r} for key '{key}'")


def _mismatch(key: str, value: object, expected: str, backend: str | None) -> DecodeError:
    return DecodeError(
        f"Expected {expected} for '{key}', got {type(value).__name__}",
        field=key,
        backend=backend,
        expected=expected,
    )
