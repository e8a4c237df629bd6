# HydroStorage - Hydroponic Monitoring Persistence Layer
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Core infrastructure: settings, logging, results, errors and the pool."""

from .config import Settings, get_settings, load_settings
from .database import Database, PoolConfig, PoolStats

__all__ = ["Database", "PoolConfig", "PoolStats", "Settings", "get_settings", "load_settings"]
