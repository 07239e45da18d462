"""Split a flat remote-state config into native and provisioning-only projections."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from remote_state._decode import decode

if TYPE_CHECKING:
    from remote_state._models import ProvisioningConfig
    from remote_state._provider import Provider
    from remote_state._types import ConfigMap


def filter_provider_only_keys(config: ConfigMap, keys: Iterable[str]) -> dict[str, object]:
    """Return a copy of ``config`` without any of ``keys``.

    The result is what gets handed to ``terraform init``. ``config`` is not
    mutated; applying the filter twice yields the same mapping.
    """
    excluded = frozenset(keys)
    return {key: value for key, value in config.items() if key not in excluded}


def normalize(provider: Provider, config: ConfigMap) -> tuple[Any, ProvisioningConfig]:
    """Decode ``config`` into the provider's typed backend and provisioning configs.

    The two projections are decoded independently from the same mapping;
    the backend config is then attached to the provisioning config.

    :raises DecodeError: If a known key holds a value of the wrong shape.
    """
    backend_config = decode(provider.backend_config_type, config, backend=provider.name)
    provisioning = decode(provider.provisioning_config_type, config, backend=provider.name)
    return backend_config, dataclasses.replace(provisioning, backend=backend_config)
