from .events import SpeedometerListener
from .exceptions import (
    AlreadyMeasuringError,
    LinkOpenError,
    NoSpeedDataError,
    WsmError,
)
from .speedometer import Speedometer

__all__ = [
    "AlreadyMeasuringError",
    "LinkOpenError",
    "NoSpeedDataError",
    "Speedometer",
    "SpeedometerListener",
    "WsmError",
]
