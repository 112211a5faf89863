"""Default configuration for the ``histogram`` dask.config namespace."""

from __future__ import annotations

from typing import Any

import dask.config

defaults: dict[str, Any] = {
    "histogram": {
        "aggregation": {"split-every": 8},
        "storage": "double",
    }
}

dask.config.update_defaults(defaults)


def get(key: str, default: Any = None) -> Any:
    """Read ``histogram.<key>`` from the active dask configuration."""
    return dask.config.get(f"histogram.{key}", default)
