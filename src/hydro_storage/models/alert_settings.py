"""Alert toggle models."""

from beartype import beartype
from pydantic import Field, StrictBool

from .base import BaseModelConfig


@beartype
class AlertSettings(BaseModelConfig):
    """Which measurements raise dashboard alerts. Always replaced as a whole."""

    temperature_alerts: StrictBool = Field(..., description="Alert on temperature")
    ph_alerts: StrictBool = Field(..., description="Alert on pH")
    tds_level_alerts: StrictBool = Field(..., description="Alert on TDS level")


DEFAULT_ALERT_SETTINGS = AlertSettings(
    temperature_alerts=True,
    ph_alerts=True,
    tds_level_alerts=False,
)
