"""
fc-metrics-updater - Regenerate Kata's Firecracker metrics bindings

Builds fc-metrics-generator, downloads Firecracker's metrics.rs, renders
fc_metrics.go from it and runs go fmt over the result.
"""

__version__ = "0.1.0"

from .config import UpdaterConfig, load_config
from .workflow import STEPS, MetricsUpdater, UpdateResult, destination_path

__all__ = [
    "MetricsUpdater",  # Main entry point
    "UpdateResult",
    "UpdaterConfig",
    "load_config",
    "destination_path",
    "STEPS",
]
