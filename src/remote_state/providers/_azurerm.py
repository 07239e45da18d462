"""AzureRM remote-state provider using azure-mgmt-storage."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from remote_state._capabilities import Capability, CapabilitySet
from remote_state._coercion import parse_bool
from remote_state._errors import DecodeError, MissingRequiredConfig
from remote_state._models import ProvisioningConfig
from remote_state._provider import Provider
from remote_state._types import Tags

log = logging.getLogger(__name__)

_ALL_CAPABILITIES = CapabilitySet(set(Capability))

_USER_AGENT = "remote-state"


@dataclasses.dataclass(frozen=True)
class AzureRMBackendConfig:
    """Options understood by Terraform's ``azurerm`` backend.

    See: https://developer.hashicorp.com/terraform/language/settings/backends/azurerm
    """

    # Storage account, container and blob
    tenant_id: str = ""
    subscription_id: str = ""
    resource_group_name: str = ""
    storage_account_name: str = ""
    container_name: str = ""
    snapshot: bool = False
    key: str = ""

    # Auth
    use_msi: str = ""  # "true"/"false", as Terraform records it
    msi_endpoint: str = ""
    use_azuread_auth: bool = False
    access_key: str = ""
    sas_token: str = ""
    client_id: str = ""
    client_secret: str = ""
    client_certificate_password: str = ""
    client_certificate_path: str = ""

    endpoint: str = ""  # Azure Stack
    environment: str = ""  # non-public clouds


@dataclasses.dataclass(frozen=True)
class AzureRMProvisioningConfig(ProvisioningConfig):
    """Provisioning-only options for the Azure storage account.

    :param location: Azure region for a new storage account (required to create).
    :param sku: Storage account SKU.
    :param kind: Storage account kind.
    :param access_tier: Default blob access tier.
    """

    location: str = ""
    sku: str = "Standard_LRS"
    kind: str = "StorageV2"
    access_tier: str = "Hot"


class AzureRMProvider(Provider):
    """Provisions the Azure storage account holding Terraform state.

    Credentials follow the backend config: a service principal when
    ``client_id``/``client_secret``/``tenant_id`` are set, a managed identity
    when ``use_msi`` is set, otherwise ``DefaultAzureCredential``.

    :param credential: Explicit ``azure.core`` token credential; overrides the config.
    """

    backend_config_type = AzureRMBackendConfig
    provisioning_config_type = AzureRMProvisioningConfig
    provider_only_keys = (
        "location",
        "tags",
        "sku",
        "kind",
        "access_tier",
        "skip_versioning",
        "skip_create",
        "skip_azure_rbac",
    )
    identifier_field = "storage_account_name"

    def __init__(self, *, credential: Any = None) -> None:
        self._credential = credential

    @property
    def name(self) -> str:
        return "azurerm"

    @property
    def capabilities(self) -> CapabilitySet:
        return _ALL_CAPABILITIES

    # region: client

    def create_client(self, backend_config: AzureRMBackendConfig) -> Any:
        from azure.mgmt.storage import StorageManagementClient

        if not backend_config.subscription_id:
            raise MissingRequiredConfig(
                "Missing required azurerm remote state configuration subscription_id",
                field="subscription_id",
                backend=self.name,
            )
        opts: dict[str, Any] = {"user_agent": _USER_AGENT}
        if backend_config.endpoint:
            opts["base_url"] = backend_config.endpoint
        return StorageManagementClient(self._authorizer(backend_config), backend_config.subscription_id, **opts)

    def _authorizer(self, backend_config: AzureRMBackendConfig) -> Any:
        if self._credential is not None:
            return self._credential

        from azure.identity import ClientSecretCredential, DefaultAzureCredential, ManagedIdentityCredential

        if backend_config.client_id and backend_config.client_secret and backend_config.tenant_id:
            return ClientSecretCredential(
                tenant_id=backend_config.tenant_id,
                client_id=backend_config.client_id,
                client_secret=backend_config.client_secret,
            )
        if self._use_msi(backend_config):
            return ManagedIdentityCredential(client_id=backend_config.client_id or None)
        return DefaultAzureCredential()

    def _use_msi(self, backend_config: AzureRMBackendConfig) -> bool:
        if not backend_config.use_msi:
            return False
        try:
            return parse_bool(backend_config.use_msi)
        except ValueError:
            raise DecodeError(
                f"Expected a boolean string for 'use_msi', got {backend_config.use_msi!r}",
                field="use_msi",
                backend=self.name,
                expected="bool string",
            ) from None

    def close_client(self, client: Any) -> None:
        client.close()

    # endregion

    # region: capabilities

    def check_name_available(self, client: Any, backend_config: AzureRMBackendConfig) -> bool:
        from azure.mgmt.storage.models import StorageAccountCheckNameAvailabilityParameters

        result = client.storage_accounts.check_name_availability(
            StorageAccountCheckNameAvailabilityParameters(name=backend_config.storage_account_name)
        )
        return bool(result.name_available)

    def create_resource(self, client: Any, config: AzureRMProvisioningConfig) -> None:  # type: ignore[override]
        from azure.mgmt.storage.models import BlobContainer, Sku, StorageAccountCreateParameters

        backend_config: AzureRMBackendConfig = config.backend
        resource_group = self._resource_group(backend_config)
        if not config.location:
            raise MissingRequiredConfig(
                "Missing required azurerm remote state configuration location",
                field="location",
                backend=self.name,
            )

        parameters = StorageAccountCreateParameters(
            sku=Sku(name=config.sku),
            kind=config.kind,
            location=config.location,
            access_tier=config.access_tier,
            tags=dict(config.tags) or None,
            allow_blob_public_access=False,
        )
        client.storage_accounts.begin_create(
            resource_group, backend_config.storage_account_name, parameters
        ).result()

        if backend_config.container_name:
            log.debug(
                "Creating container %s in storage account %s",
                backend_config.container_name,
                backend_config.storage_account_name,
            )
            client.blob_containers.create(
                resource_group,
                backend_config.storage_account_name,
                backend_config.container_name,
                BlobContainer(),
            )

    def get_versioning(self, client: Any, backend_config: AzureRMBackendConfig) -> bool:
        properties = client.blob_services.get_service_properties(
            self._resource_group(backend_config), backend_config.storage_account_name
        )
        return bool(properties.is_versioning_enabled)

    def enable_versioning(self, client: Any, backend_config: AzureRMBackendConfig) -> None:
        from azure.mgmt.storage.models import BlobServiceProperties

        client.blob_services.set_service_properties(
            self._resource_group(backend_config),
            backend_config.storage_account_name,
            BlobServiceProperties(is_versioning_enabled=True),
        )

    def apply_tags(self, client: Any, backend_config: AzureRMBackendConfig, tags: Tags) -> None:
        from azure.mgmt.storage.models import StorageAccountUpdateParameters

        client.storage_accounts.update(
            self._resource_group(backend_config),
            backend_config.storage_account_name,
            StorageAccountUpdateParameters(tags=tags),
        )

    # endregion

    def _resource_group(self, backend_config: AzureRMBackendConfig) -> str:
        if not backend_config.resource_group_name:
            raise MissingRequiredConfig(
                "Missing required azurerm remote state configuration resource_group_name",
                field="resource_group_name",
                backend=self.name,
            )
        return backend_config.resource_group_name
