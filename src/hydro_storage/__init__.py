# HydroStorage - Hydroponic Monitoring Persistence Layer
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""PostgreSQL persistence for hydroponic sensor readings, system status and alert settings."""

from .core.errors import (
    ConfigurationError,
    ConnectionTimeout,
    NotFoundError,
    PersistenceError,
    PoolClosed,
    StorageConnectionError,
    StorageError,
    ValidationError,
)
from .core.result_types import Err, Ok, Result
from .models import (
    AlertSettings,
    ConnectionStatus,
    SensorReading,
    SystemStatus,
    SystemStatusUpdate,
)
from .storage import HydroponicStorage, open_storage

__version__ = "0.1.0"

__all__ = [
    "AlertSettings",
    "ConfigurationError",
    "ConnectionStatus",
    "ConnectionTimeout",
    "Err",
    "HydroponicStorage",
    "NotFoundError",
    "Ok",
    "PersistenceError",
    "PoolClosed",
    "Result",
    "SensorReading",
    "StorageConnectionError",
    "StorageError",
    "SystemStatus",
    "SystemStatusUpdate",
    "ValidationError",
    "open_storage",
]
