"""Configuration model — immutable data containers for the engine and remote-state declarations."""

from __future__ import annotations

import dataclasses
import enum

MAX_RETRIES_WAITING_FOR_RESOURCE = 12
SLEEP_BETWEEN_RETRIES_WAITING_FOR_RESOURCE = 5.0


class VersioningMode(enum.Enum):
    """What to do when versioning is disabled on an existing resource."""

    ENFORCE = "enforce"
    WARN = "warn"


@dataclasses.dataclass(frozen=True)
class ReconcileSettings:
    """Engine-wide reconciliation settings.

    :param versioning_mode: Enable versioning (``ENFORCE``) or only warn (``WARN``).
    :param max_retries: Existence checks performed after a create before giving up.
    :param retry_interval: Seconds slept between existence checks.
    """

    versioning_mode: VersioningMode = VersioningMode.WARN
    max_retries: int = MAX_RETRIES_WAITING_FOR_RESOURCE
    retry_interval: float = SLEEP_BETWEEN_RETRIES_WAITING_FOR_RESOURCE

    def validate(self) -> None:
        """Validate the retry bounds.

        :raises ValueError: If ``max_retries`` is below 1 or ``retry_interval`` is negative.
        """
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.retry_interval < 0:
            raise ValueError(f"retry_interval must not be negative, got {self.retry_interval}")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> ReconcileSettings:
        """Construct from a plain dict (e.g. parsed TOML/JSON).

        :param data: Dict with optional ``versioning_mode``, ``max_retries`` and
            ``retry_interval`` keys.
        :raises ValueError: If ``versioning_mode`` is not a known mode.
        """
        mode = data.get("versioning_mode", VersioningMode.WARN.value)
        try:
            versioning_mode = VersioningMode(mode)
        except ValueError:
            raise ValueError(
                f"Unknown versioning_mode {mode!r}. Expected one of: {sorted(m.value for m in VersioningMode)}"
            ) from None
        settings = cls(
            versioning_mode=versioning_mode,
            max_retries=int(data.get("max_retries", MAX_RETRIES_WAITING_FOR_RESOURCE)),  # type: ignore[call-overload]
            retry_interval=float(
                data.get("retry_interval", SLEEP_BETWEEN_RETRIES_WAITING_FOR_RESOURCE)  # type: ignore[arg-type]
            ),
        )
        settings.validate()
        return settings


@dataclasses.dataclass(frozen=True)
class RemoteState:
    """A user's ``remote_state`` declaration.

    :param backend: Backend type (e.g. ``"s3"``, ``"azurerm"``).
    :param config: Flat backend configuration, provisioning-only keys included.
    :param disable_init: Never report that initialization is needed.
    """

    backend: str
    config: dict[str, object] = dataclasses.field(default_factory=dict)
    disable_init: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RemoteState:
        """Construct from a plain dict.

        :param data: Dict with ``backend`` and optional ``config`` and ``disable_init`` keys.
        """
        raw_config = data.get("config", {})
        if not isinstance(raw_config, dict):
            msg = "Expected 'config' to be a dict"
            raise TypeError(msg)
        disable_init = data.get("disable_init", False)
        if not isinstance(disable_init, bool):
            msg = "Expected 'disable_init' to be a bool"
            raise TypeError(msg)
        return cls(backend=str(data["backend"]), config=dict(raw_config), disable_init=disable_init)
