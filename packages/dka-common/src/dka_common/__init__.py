"""
dka-common: Shared library for the DKA audit API.

Provides configuration management, structured logging, the error
hierarchy, data models, database connections and ORM models, and
Prometheus metric definitions used by the API service and scripts.
"""

from dka_common.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
