"""Provider abstract base class — the capability contract behind the engine."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any

from remote_state._normalize import filter_provider_only_keys

if TYPE_CHECKING:
    from remote_state._capabilities import CapabilitySet
    from remote_state._models import ProvisioningConfig
    from remote_state._types import ConfigMap, Tags


class Provider(abc.ABC):
    """Abstract base class for remote-state storage providers.

    A provider supplies its typed config dataclasses, the keys that are only
    used for provisioning, and the control-plane calls. Drift detection,
    validation, retries and error mapping live in the generic
    :class:`~remote_state.Reconciler`.

    Provider methods may raise native SDK exceptions; the reconciler maps
    them to :class:`~remote_state.RemoteCallError`.

    :cvar backend_config_type: Dataclass decoded for the native backend fields.
    :cvar provisioning_config_type: ``ProvisioningConfig`` subclass decoded for
        provisioning-only fields.
    :cvar provider_only_keys: Ordered keys never forwarded to ``terraform init``.
    :cvar identifier_field: Attribute of the backend config naming the storage
        resource; the only required field.
    """

    backend_config_type: type
    provisioning_config_type: type[ProvisioningConfig]
    provider_only_keys: tuple[str, ...] = ()
    identifier_field: str

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Backend type tag as recorded by Terraform (e.g. ``'s3'``)."""

    @property
    @abc.abstractmethod
    def capabilities(self) -> CapabilitySet:
        """Declared capabilities of this provider."""

    def identifier(self, backend_config: Any) -> str:
        """Return the storage resource name from a typed backend config."""
        return str(getattr(backend_config, self.identifier_field, "") or "")

    def get_filtered_config(self, config: ConfigMap) -> dict[str, object]:
        """Return ``config`` without this provider's provisioning-only keys."""
        return filter_provider_only_keys(config, self.provider_only_keys)

    @abc.abstractmethod
    def create_client(self, backend_config: Any) -> Any:
        """Return an authenticated control-plane client for ``backend_config``."""

    @abc.abstractmethod
    def check_name_available(self, client: Any, backend_config: Any) -> bool:
        """Return ``True`` if the storage resource name is free (the resource does not exist)."""

    @abc.abstractmethod
    def create_resource(self, client: Any, config: ProvisioningConfig) -> None:
        """Create the storage resource described by ``config``."""

    @abc.abstractmethod
    def get_versioning(self, client: Any, backend_config: Any) -> bool:
        """Return ``True`` if object versioning is enabled on the resource."""

    @abc.abstractmethod
    def enable_versioning(self, client: Any, backend_config: Any) -> None:
        """Enable object versioning on the resource."""

    @abc.abstractmethod
    def apply_tags(self, client: Any, backend_config: Any, tags: Tags) -> None:
        """Apply ``tags`` to the resource."""

    def close_client(self, client: Any) -> None:  # noqa: B027
        """Release client resources. Default is a no-op."""
