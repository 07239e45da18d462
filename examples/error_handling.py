"""Error handling: catching DecodeError, MissingRequiredConfig, RemoteCallError, etc.

Demonstrates the error hierarchy and its structured attributes. Provisioning
against a real account needs credentials; without them the remote call fails
and is reported as a RemoteCallError.
"""

from __future__ import annotations

import threading

from remote_state import (
    ConsistencyTimeoutError,
    DecodeError,
    MissingRequiredConfig,
    ReconcileCancelled,
    RemoteCallError,
    RemoteState,
    RemoteStateError,
    reconciler_for,
)

if __name__ == "__main__":
    # --- DecodeError: wrong value type for a known key ---
    state = RemoteState(backend="s3", config={"bucket": "acme-terraform-state", "encrypt": "yes"})
    reconciler = reconciler_for(state)
    try:
        reconciler.normalize(state.config)
    except DecodeError as exc:
        print(f"DecodeError: {exc}")
        print(f"  field={exc.field}, expected={exc.expected}")

    # --- MissingRequiredConfig: no bucket ---
    try:
        reconciler.initialize(RemoteState(backend="s3", config={"key": "terraform.tfstate"}))
    except MissingRequiredConfig as exc:
        print(f"\nMissingRequiredConfig: {exc}")
        print(f"  field={exc.field}, backend={exc.backend}")

    # --- ReconcileCancelled: token already set ---
    cancel = threading.Event()
    cancel.set()
    try:
        reconciler.initialize(RemoteState(backend="s3", config={"bucket": "acme-terraform-state"}), cancel=cancel)
    except ReconcileCancelled as exc:
        print(f"\nReconcileCancelled: {exc}")
    except RemoteCallError as exc:
        print(f"\nRemoteCallError: {exc}")
        print(f"  operation={exc.operation}")

    # --- Catch-all ---
    try:
        reconciler.initialize(RemoteState(backend="s3", config={"bucket": "acme-terraform-state"}))
    except ConsistencyTimeoutError as exc:
        print(f"\nConsistencyTimeoutError after {exc.attempts} attempts: {exc}")
    except RemoteStateError as exc:
        print(f"\n{type(exc).__name__}: {exc}")
