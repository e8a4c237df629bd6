# HydroStorage - Hydroponic Monitoring Persistence Layer
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all storage models.

Models are immutable, reject unknown fields and expose camelCase aliases
(``tdsLevel``, ``connectionStatus``) for the dashboard payloads while the
Python attributes stay snake_case.
"""

from datetime import datetime, timezone
from typing import Any

from beartype import beartype
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


@beartype
def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive input is taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@beartype
def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with millisecond precision.

    >>> format_timestamp(datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc))
    '2024-05-01T12:30:00.000Z'
    """
    return to_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@beartype
class BaseModelConfig(BaseModel):
    """Base model with strict configuration for all stored entities.

    Enforces:
    - Immutability (frozen=True)
    - No extra fields allowed (extra="forbid")
    - Validation on assignment
    - camelCase aliases, population by either name
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """Dump to the camelCase JSON-compatible shape callers consume."""
        return self.model_dump(mode="json", by_alias=True)
