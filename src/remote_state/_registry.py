"""Registry — maps backend type tags to provider classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from remote_state._reconciler import Reconciler

if TYPE_CHECKING:
    from remote_state._config import ReconcileSettings, RemoteState
    from remote_state._provider import Provider

# Global provider factory registry: maps backend type tags to provider classes.
_PROVIDER_FACTORIES: dict[str, type[Provider]] = {}


def register_provider(type_name: str, cls: type[Provider]) -> None:
    """Register a provider class for a given backend type tag.

    :param type_name: The backend type (e.g. ``"s3"``).
    :param cls: The provider class to instantiate.
    """
    _PROVIDER_FACTORIES[type_name] = cls


def _register_builtin_providers() -> None:
    """Register the built-in providers. Their SDKs are imported lazily."""
    from remote_state.providers._azurerm import AzureRMProvider
    from remote_state.providers._s3 import S3Provider

    if "s3" not in _PROVIDER_FACTORIES:
        register_provider("s3", S3Provider)
    if "azurerm" not in _PROVIDER_FACTORIES:
        register_provider("azurerm", AzureRMProvider)


def get_provider(type_name: str, **options: Any) -> Provider:
    """Instantiate the provider registered for ``type_name``.

    :param options: Keyword arguments passed to the provider constructor.
    :raises ValueError: If the type is unknown or the options are invalid.
    """
    _register_builtin_providers()
    if type_name not in _PROVIDER_FACTORIES:
        raise ValueError(
            f"Unknown backend type '{type_name}'. Registered types: {sorted(_PROVIDER_FACTORIES.keys())}"
        )
    factory = _PROVIDER_FACTORIES[type_name]
    try:
        return factory(**options)
    except TypeError as exc:
        raise ValueError(
            f"Invalid options for provider {type_name!r}: {exc}. Provided options: {sorted(options.keys())}"
        ) from exc


def reconciler_for(
    remote_state: RemoteState,
    settings: ReconcileSettings | None = None,
    **options: Any,
) -> Reconciler:
    """Build a :class:`Reconciler` for the provider named by ``remote_state.backend``.

    :param options: Keyword arguments passed to the provider constructor.
    :raises ValueError: If the backend type is unknown.
    """
    return Reconciler(get_provider(remote_state.backend, **options), settings)
