"""Drift detection between a desired config and the recorded backend."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from remote_state._coercion import DEFAULT_RULES, CoercionRule, coerce_recorded
from remote_state._normalize import filter_provider_only_keys

if TYPE_CHECKING:
    from remote_state._models import ExistingBackendRecord
    from remote_state._types import ConfigMap

log = logging.getLogger(__name__)


def needs_reinit(
    desired: ConfigMap,
    existing: ExistingBackendRecord | None,
    *,
    backend_type: str,
    provider_only_keys: Iterable[str] = (),
    rules: tuple[CoercionRule, ...] = DEFAULT_RULES,
) -> bool:
    """Return ``True`` if the recorded backend no longer matches ``desired``.

    Provider-only keys are stripped from ``desired`` before the coercion
    pass, and coercion runs before the comparison, so neither tags nor
    serialization differences report drift on their own.

    :param desired: The user-declared backend config.
    :param existing: The recorded backend, or ``None`` if never initialized.
    :param backend_type: The type tag the recorded backend must carry.
    :param provider_only_keys: Keys never forwarded to the backend.
    :param rules: Coercion rules applied to the recorded values.
    """
    if existing is None:
        return len(desired) != 0

    if existing.type != backend_type:
        log.debug("Backend type has changed from %s to %s", existing.type, backend_type)
        return True

    if not desired and not existing.config:
        return False

    comparison = filter_provider_only_keys(desired, provider_only_keys)
    recorded = coerce_recorded(existing.config, comparison, rules)

    if not config_equal(recorded, comparison):
        log.debug("Backend config changed from %s to %s", existing.config, comparison)
        return True
    return False


def config_equal(recorded: ConfigMap, desired: ConfigMap) -> bool:
    """Compare two flat backend configs, treating ``None`` values as unset."""
    for key in recorded.keys() | desired.keys():
        if not values_equal(recorded.get(key), desired.get(key)):
            return False
    return True


def values_equal(a: object, b: object) -> bool:
    """Deep, order-independent equality that keeps ``bool`` distinct from numbers."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    return a == b
