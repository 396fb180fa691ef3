"""Core types, configuration and validation for AHRS orientation estimation."""

from .types import (
    ImuReading,
    Quaternion,
    EulerAngles,
    FusionState,
    ValidationResult,
    SourceStats,
)
from .validation import SensorValidator, QuaternionValidator, validate_sample_period
from .quaternion import QuaternionOps
from .config import Config, load_config

__all__ = [
    "ImuReading",
    "Quaternion",
    "EulerAngles",
    "FusionState",
    "ValidationResult",
    "SourceStats",
    "SensorValidator",
    "QuaternionValidator",
    "validate_sample_period",
    "QuaternionOps",
    "Config",
    "load_config",
]
