"""Provider-agnostic reconciliation of Terraform remote-state backends."""

from remote_state._capabilities import Capability, CapabilitySet
from remote_state._coercion import DEFAULT_RULES, CoercionRule, coerce_recorded
from remote_state._config import ReconcileSettings, RemoteState, VersioningMode
from remote_state._decode import decode
from remote_state._drift import needs_reinit
from remote_state._errors import (
    AmbiguousExistenceError,
    CapabilityNotSupported,
    ConsistencyTimeoutError,
    DecodeError,
    MissingRequiredConfig,
    ReconcileCancelled,
    RemoteCallError,
    RemoteStateError,
)
from remote_state._models import ExistingBackendRecord, ProvisioningConfig
from remote_state._normalize import filter_provider_only_keys, normalize
from remote_state._provider import Provider
from remote_state._reconciler import Reconciler
from remote_state._registry import get_provider, reconciler_for, register_provider
from remote_state._validate import validate

__version__ = "0.1.0"

__all__ = [
    # Core
    "Reconciler",
    "Provider",
    "get_provider",
    "reconciler_for",
    "register_provider",
    # Pipeline stages
    "normalize",
    "filter_provider_only_keys",
    "validate",
    "needs_reinit",
    "decode",
    # Coercion
    "CoercionRule",
    "DEFAULT_RULES",
    "coerce_recorded",
    # Models & Config
    "ExistingBackendRecord",
    "ProvisioningConfig",
    "RemoteState",
    "ReconcileSettings",
    "VersioningMode",
    # Capabilities
    "Capability",
    "CapabilitySet",
    # Errors
    "RemoteStateError",
    "DecodeError",
    "MissingRequiredConfig",
    "RemoteCallError",
    "ConsistencyTimeoutError",
    "AmbiguousExistenceError",
    "CapabilityNotSupported",
    "ReconcileCancelled",
    # Version
    "__version__",
]
