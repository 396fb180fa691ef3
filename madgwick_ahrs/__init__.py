"""Madgwick AHRS orientation estimation from gyroscope, accelerometer and magnetometer."""

from .core import EulerAngles, ImuReading, Quaternion
from .fusion import MadgwickAHRS

__version__ = "0.1.0"

__all__ = [
    "EulerAngles",
    "ImuReading",
    "MadgwickAHRS",
    "Quaternion",
]
