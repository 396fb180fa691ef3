"""Sensor fusion filters for orientation estimation."""

from .madgwick import MadgwickAHRS

__all__ = [
    "MadgwickAHRS",
]
