"""Reconciler — decides whether a backend needs init and provisions its storage."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable

from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from remote_state._capabilities import Capability
from remote_state._config import ReconcileSettings, VersioningMode
from remote_state._drift import needs_reinit
from remote_state._errors import (
    AmbiguousExistenceError,
    ConsistencyTimeoutError,
    ReconcileCancelled,
    RemoteCallError,
    RemoteStateError,
)
from remote_state._normalize import normalize
from remote_state._validate import validate

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterator

    from remote_state._config import RemoteState
    from remote_state._models import ExistingBackendRecord, ProvisioningConfig
    from remote_state._provider import Provider
    from remote_state._types import ConfigMap

log = logging.getLogger(__name__)


class Reconciler:
    """Reconciles a remote-state backend against one provider.

    A reconciler holds no mutable state; every call derives its configs
    and, for :meth:`initialize` and :meth:`needs_initialization`, its own
    client. Clients passed to the lower-level steps must not be shared
    between concurrent reconciliations.

    :param provider: The storage provider to reconcile against.
    :param settings: Engine settings. Validated immediately.
    :param sleep: Sleep function used between existence checks.
    :raises ValueError: If settings are invalid.
    """

    def __init__(
        self,
        provider: Provider,
        settings: ReconcileSettings | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._provider = provider
        self._settings = settings or ReconcileSettings()
        self._settings.validate()
        self._sleep = sleep

    def __repr__(self) -> str:
        return f"Reconciler(provider={self._provider.name!r}, versioning_mode={self._settings.versioning_mode.value!r})"

    @property
    def provider(self) -> Provider:
        return self._provider

    @property
    def settings(self) -> ReconcileSettings:
        return self._settings

    # region: error mapping

    @contextmanager
    def _remote_call(self, operation: str) -> Iterator[None]:
        """Map provider-native exceptions to ``RemoteCallError``."""
        try:
            yield
        except RemoteStateError:
            raise
        except Exception as exc:
            raise RemoteCallError(
                f"{operation} failed: {exc}",
                backend=self._provider.name,
                operation=operation,
            ) from exc

    def _check_cancelled(self, cancel: threading.Event | None, name: str) -> None:
        if cancel is not None and cancel.is_set():
            raise ReconcileCancelled(
                f"Reconciliation of {name!r} was cancelled",
                field=self._provider.identifier_field,
                backend=self._provider.name,
            )

    # endregion

    # region: decision

    def get_filtered_config(self, config: ConfigMap) -> dict[str, object]:
        """Return the config to pass to ``terraform init`` (provisioning-only keys removed)."""
        return self._provider.get_filtered_config(config)

    def normalize(self, config: ConfigMap) -> tuple[Any, ProvisioningConfig]:
        """Decode ``config`` into the provider's typed backend and provisioning configs.

        :raises DecodeError: If a known key holds a value of the wrong shape.
        """
        return normalize(self._provider, config)

    def needs_reinit(self, desired: ConfigMap, existing: ExistingBackendRecord | None) -> bool:
        """Return ``True`` if ``existing`` has drifted from ``desired``."""
        return needs_reinit(
            desired,
            existing,
            backend_type=self._provider.name,
            provider_only_keys=self._provider.provider_only_keys,
        )

    def needs_initialization(self, remote_state: RemoteState, existing: ExistingBackendRecord | None) -> bool:
        """Return ``True`` if the backend must be (re-)initialized.

        That is the case when the storage resource does not exist, or when
        the recorded backend differs from the declared one.

        :raises DecodeError: If the config is malformed.
        :raises MissingRequiredConfig: If the storage identifier is empty.
        :raises AmbiguousExistenceError: If the existence probe failed.
        """
        if remote_state.disable_init:
            return False
        self._check_backend(remote_state)

        backend_config, provisioning = self.normalize(remote_state.config)
        validate(self._provider, provisioning)

        client = self._create_client(backend_config)
        try:
            exists = self.exists(client, backend_config)
        finally:
            self._provider.close_client(client)

        if not exists:
            log.debug(
                "Remote state %s storage resource %s does not exist",
                self._provider.name,
                self._provider.identifier(backend_config),
            )
            return True
        return self.needs_reinit(remote_state.config, existing)

    # endregion

    # region: provisioning

    def initialize(self, remote_state: RemoteState, *, cancel: threading.Event | None = None) -> None:
        """Validate the declared config and provision its storage resource.

        :param cancel: Checked between existence polls; when set the call
            raises ``ReconcileCancelled``.
        """
        self._check_backend(remote_state)
        backend_config, provisioning = self.normalize(remote_state.config)
        validate(self._provider, provisioning)

        client = self._create_client(backend_config)
        try:
            self.ensure_provisioned(client, provisioning, cancel=cancel)
        finally:
            self._provider.close_client(client)

    def ensure_provisioned(
        self,
        client: Any,
        provisioning: ProvisioningConfig,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Create the resource if absent, check versioning, and apply tags.

        Every step is a no-op when its precondition already holds, so a
        failed run can simply be repeated.
        """
        self.create_if_absent(client, provisioning, cancel=cancel)
        self.ensure_versioning(client, provisioning)
        self.apply_labels(client, provisioning)

    def exists(self, client: Any, backend_config: Any) -> bool:
        """Return ``True`` unless the provider reports the resource name as available.

        :raises AmbiguousExistenceError: If the probe fails. The resource must
            then be assumed to exist.
        """
        self._provider.capabilities.require(Capability.PROBE_EXISTENCE, backend=self._provider.name)
        name = self._provider.identifier(backend_config)
        try:
            available = self._provider.check_name_available(client, backend_config)
        except Exception as exc:
            raise AmbiguousExistenceError(
                f"Could not determine whether {name!r} exists: {exc}",
                field=self._provider.identifier_field,
                backend=self._provider.name,
            ) from exc
        return not available

    def create_if_absent(
        self,
        client: Any,
        provisioning: ProvisioningConfig,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Create the storage resource unless it exists or ``skip_create`` is set.

        :raises ConsistencyTimeoutError: If the created resource never becomes visible.
        """
        name = self._provider.identifier(provisioning.backend)
        if provisioning.skip_create or not name:
            log.debug("Skipping creation of remote state storage resource %r", name)
            return
        self._provider.capabilities.require(Capability.CREATE_RESOURCE, backend=self._provider.name)
        self._check_cancelled(cancel, name)

        if self.exists(client, provisioning.backend):
            log.debug("Remote state storage resource %r already exists", name)
            return

        log.info("Remote state %s storage resource %r does not exist. Creating it now.", self._provider.name, name)
        with self._remote_call("create_resource"):
            self._provider.create_resource(client, provisioning)
        self.wait_until_exists(client, provisioning.backend, cancel=cancel)

    def wait_until_exists(self, client: Any, backend_config: Any, *, cancel: threading.Event | None = None) -> None:
        """Poll until the resource is visible to reads.

        Control planes are eventually consistent: a freshly created resource
        may be reported as missing for a while. Failed probes are retried
        like negative ones.

        :raises ConsistencyTimeoutError: If the retry ceiling is exhausted.
        :raises ReconcileCancelled: If ``cancel`` is set between attempts.
        """
        name = self._provider.identifier(backend_config)
        attempts = self._settings.max_retries

        def _probe() -> bool:
            self._check_cancelled(cancel, name)
            return self.exists(client, backend_config)

        retrying = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(self._settings.retry_interval),
            retry=retry_if_result(lambda found: not found) | retry_if_exception_type(AmbiguousExistenceError),
            before_sleep=before_sleep_log(log, logging.WARNING),  # type: ignore[arg-type,unused-ignore]
            sleep=self._sleep,
        )
        try:
            retrying(_probe)
        except RetryError as exc:
            raise ConsistencyTimeoutError(
                f"Timed out waiting for {name!r} to become visible after {attempts} attempts",
                field=self._provider.identifier_field,
                backend=self._provider.name,
                attempts=attempts,
            ) from exc
        log.debug("Remote state storage resource %r is now visible", name)

    def ensure_versioning(self, client: Any, provisioning: ProvisioningConfig) -> None:
        """Enable versioning, or warn that it is off, depending on the versioning mode."""
        name = self._provider.identifier(provisioning.backend)
        if provisioning.skip_versioning or not name:
            log.debug("Skipping versioning check for remote state storage resource %r", name)
            return
        self._provider.capabilities.require(Capability.VERSIONING, backend=self._provider.name)

        with self._remote_call("get_versioning"):
            enabled = self._provider.get_versioning(client, provisioning.backend)
        if enabled:
            return

        if self._settings.versioning_mode is VersioningMode.ENFORCE:
            log.info("Enabling versioning on remote state storage resource %r", name)
            with self._remote_call("enable_versioning"):
                self._provider.enable_versioning(client, provisioning.backend)
            return

        log.warning(
            "Versioning is not enabled for the remote state %s storage resource %r. "
            "We recommend enabling versioning so that you can roll back to previous "
            "versions of your state in case of error.",
            self._provider.name,
            name,
        )

    def apply_labels(self, client: Any, provisioning: ProvisioningConfig) -> None:
        """Apply the declared tags; runs whether or not the resource was just created."""
        if not provisioning.tags:
            return
        self._provider.capabilities.require(Capability.TAGS, backend=self._provider.name)
        name = self._provider.identifier(provisioning.backend)
        log.info("Applying tags to remote state storage resource %r", name)
        with self._remote_call("apply_tags"):
            self._provider.apply_tags(client, provisioning.backend, dict(provisioning.tags))

    # endregion

    # region: helpers

    def _check_backend(self, remote_state: RemoteState) -> None:
        if remote_state.backend != self._provider.name:
            raise ValueError(
                f"Remote state backend {remote_state.backend!r} does not match provider {self._provider.name!r}"
            )

    def _create_client(self, backend_config: Any) -> Any:
        with self._remote_call("create_client"):
            return self._provider.create_client(backend_config)

    # endregion
