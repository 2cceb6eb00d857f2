"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- Mesh radio client (serial/TCP)
- Warning and forecast page clients (HTTP + scraping)
- Lightning feed client (MQTT)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from stormrelay.shell.mesh_client import MeshClient, MeshResponse
from stormrelay.shell.warning_client import WarningClient
from stormrelay.shell.forecast_client import ForecastClient
from stormrelay.shell.lightning_client import LightningClient
from stormrelay.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "MeshClient",
    "MeshResponse",
    "WarningClient",
    "ForecastClient",
    "LightningClient",
    "load_config",
    "load_config_from_env",
]
