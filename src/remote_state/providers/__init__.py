"""Provider implementations."""

from remote_state.providers._azurerm import AzureRMBackendConfig, AzureRMProvider, AzureRMProvisioningConfig
from remote_state.providers._s3 import S3BackendConfig, S3Provider, S3ProvisioningConfig

__all__ = [
    "AzureRMBackendConfig",
    "AzureRMProvider",
    "AzureRMProvisioningConfig",
    "S3BackendConfig",
    "S3Provider",
    "S3ProvisioningConfig",
]
