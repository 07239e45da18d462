"""Structural validation run before any remote call."""

from __future__ import annotations

from typing import TYPE_CHECKING

from remote_state._errors import MissingRequiredConfig

if TYPE_CHECKING:
    from remote_state._models import ProvisioningConfig
    from remote_state._provider import Provider


def validate(provider: Provider, provisioning: ProvisioningConfig) -> None:
    """Check the provider's storage identifier is set.

    :raises MissingRequiredConfig: If the identifier field is empty.
    """
    if not provider.identifier(provisioning.backend):
        raise MissingRequiredConfig(
            f"Missing required {provider.name} remote state configuration {provider.identifier_field}",
            field=provider.identifier_field,
            backend=provider.name,
        )
