"""Logging setup for the storage layer and its scripts.

Library modules only ever call ``logging.getLogger(__name__)``; the process
that embeds the storage layer decides how records are emitted. The helpers
here are for the entry points under ``scripts/`` and for hosts that have no
logging setup of their own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from beartype import beartype

if TYPE_CHECKING:
    from .config import Settings

__all__: Final = [
    "configure_from_settings",
    "configure_logging",
    "get_logger",
]

_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_ROOT_LOGGER_NAME: Final = "hydro_storage"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int | str = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Install a stream handler on the root logger once.

    Later calls only adjust the ``hydro_storage`` logger level.
    """
    global _is_configured
    if _is_configured:
        logging.getLogger(_ROOT_LOGGER_NAME).setLevel(level)
        return

    logging.basicConfig(level=level, format=fmt)
    _is_configured = True


def configure_from_settings(settings: Settings) -> None:
    """Configure logging at ``settings.log_level`` (``LOG_LEVEL``)."""
    configure_logging(level=settings.log_level)


@beartype
def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under ``hydro_storage``, configuring defaults if nobody has."""
    if not _is_configured:
        configure_logging()
    return logging.getLogger(name or _ROOT_LOGGER_NAME)
