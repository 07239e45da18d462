"""Immutable records describing recorded and derived backend configuration."""

from __future__ import annotations

import dataclasses
from typing import Any

from remote_state._types import Tags


@dataclasses.dataclass(frozen=True)
class ExistingBackendRecord:
    """The backend declaration persisted by a previous ``terraform init``.

    :param type: Backend type tag (e.g. ``"s3"``, ``"azurerm"``).
    :param config: Flat configuration mapping as recorded in state metadata.
    """

    type: str
    config: dict[str, object] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> ExistingBackendRecord:
        """Construct from the ``backend`` block of a ``terraform.tfstate`` file.

        :param data: Dict with ``type`` and ``config`` keys.
        """
        raw_config = data.get("config") or {}
        if not isinstance(raw_config, dict):
            msg = "Expected backend 'config' to be a dict"
            raise TypeError(msg)
        return cls(type=str(data["type"]), config=dict(raw_config))


@dataclasses.dataclass(frozen=True)
class ProvisioningConfig:
    """Provisioning-only settings shared by every provider.

    Providers subclass this to add their own fields. The decoded native
    backend config is attached as ``backend`` after decoding; it is never
    read from the source mapping.

    :param backend: The provider's typed backend config.
    :param tags: Tags/labels to apply to the storage resource.
    :param skip_create: Never create the storage resource.
    :param skip_versioning: Never inspect or change versioning.
    """

    backend: Any = dataclasses.field(default=None, metadata={"decode": False})
    tags: Tags = dataclasses.field(default_factory=dict)
    skip_create: bool = False
    skip_versioning: bool = False
