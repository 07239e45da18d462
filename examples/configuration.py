"""Configuration: settings from code or from_dict(), and drift checks without a cloud.

Demonstrates building ReconcileSettings and RemoteState from plain dicts
(e.g. parsed TOML/JSON) and asking whether a recorded backend needs
re-initialization.
"""

from __future__ import annotations

import logging

from remote_state import ExistingBackendRecord, ReconcileSettings, RemoteState, reconciler_for

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # --- Option 1: config-as-code ---
    settings = ReconcileSettings(max_retries=6, retry_interval=2.0)

    # --- Option 2: from_dict() ---
    settings = ReconcileSettings.from_dict({"versioning_mode": "enforce", "max_retries": 6})
    state = RemoteState.from_dict(
        {
            "backend": "s3",
            "config": {
                "bucket": "acme-terraform-state",
                "key": "network/terraform.tfstate",
                "region": "eu-west-1",
                "encrypt": True,
                "s3_bucket_tags": {"team": "platform"},
            },
        }
    )

    reconciler = reconciler_for(state, settings)
    print(reconciler)

    # Provisioning-only keys never reach the recorded backend config
    print("Recorded config:", reconciler.get_filtered_config(state.config))

    # The recorded state stores booleans as strings; they still compare equal
    recorded = ExistingBackendRecord(
        type="s3",
        config={
            "bucket": "acme-terraform-state",
            "key": "network/terraform.tfstate",
            "region": "eu-west-1",
            "encrypt": "true",
        },
    )
    print("Needs re-init:", reconciler.needs_reinit(state.config, recorded))

    moved = dict(state.config, key="network/v2/terraform.tfstate")
    print("Needs re-init after moving the key:", reconciler.needs_reinit(moved, recorded))
