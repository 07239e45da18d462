"""Table-driven coercion of serialized values before config comparison.

Terraform records backend settings as strings in some versions and as
native values in others. Each rule rewrites a recorded value into the type
the desired config uses, so that equal settings serialized differently do
not count as drift.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Callable, NamedTuple

if TYPE_CHECKING:
    from remote_state._types import ConfigMap

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(value: object) -> bool:
    """Parse a string-encoded boolean.

    :raises ValueError: If ``value`` is not a recognized boolean spelling.
    """
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise ValueError(f"Invalid boolean string: {value!r}")


class CoercionRule(NamedTuple):
    """Rewrite a recorded value of ``recorded`` type when the desired value is of ``desired`` type.

    :param recorded: Exact type of the value in the existing record.
    :param desired: Exact type of the value in the desired config.
    :param convert: Conversion; raising ``ValueError`` leaves the value untouched.
    """

    recorded: type
    desired: type
    convert: Callable[[object], object]


DEFAULT_RULES: tuple[CoercionRule, ...] = (
    CoercionRule(str, bool, parse_bool),
    CoercionRule(str, int, lambda v: int(str(v))),
    CoercionRule(str, float, lambda v: float(str(v))),
)


def coerce_recorded(
    recorded: ConfigMap,
    desired: ConfigMap,
    rules: tuple[CoercionRule, ...] = DEFAULT_RULES,
) -> dict[str, object]:
    """Return a copy of ``recorded`` with values coerced toward ``desired``'s types.

    Only keys present in both mappings are considered. The first rule
    matching the exact types of both values applies. Neither input is
    mutated.
    """
    result = dict(recorded)
    for key, value in recorded.items():
        if key not in desired:
            continue
        target = desired[key]
        for rule in rules:
            if type(value) is rule.recorded and type(target) is rule.desired:
                with contextlib.suppress(ValueError):
                    result[key] = rule.convert(value)
                break
    return result
