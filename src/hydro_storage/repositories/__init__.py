"""Repositories over the three hydroponic tables."""

from .alert_settings import AlertSettingsRepository
from .readings import DEFAULT_RECENT_LIMIT, ReadingsRepository
from .schema import (
    ALERT_SETTINGS_TABLE,
    READINGS_TABLE,
    STATUS_TABLE,
    BootstrapReport,
    SchemaBootstrapper,
)
from .status import StatusRepository, build_status_update

__all__ = [
    "ALERT_SETTINGS_TABLE",
    "AlertSettingsRepository",
    "BootstrapReport",
    "DEFAULT_RECENT_LIMIT",
    "READINGS_TABLE",
    "ReadingsRepository",
    "STATUS_TABLE",
    "SchemaBootstrapper",
    "StatusRepository",
    "build_status_update",
]
