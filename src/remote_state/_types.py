"""Type aliases used throughout remote_state."""

from __future__ import annotations

from collections.abc import Mapping

ConfigMap = Mapping[str, object]
Tags = dict[str, str]
