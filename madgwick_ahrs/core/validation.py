"""Input validation for sensor samples and filter state.

The filter itself accepts any numeric input. These checks run in the
driver, before a sample reaches the filter.
"""

from typing import Optional
import numpy as np

from .types import ImuReading, ValidationResult, Quaternion
from .config import Config


class SensorValidator:
    """Validates IMU samples before they are fed to the filter."""

    def __init__(self, config: Config):
        """Initialize validator with configuration.

        Args:
            config: System configuration with validation thresholds.
        """
        self._config = config
        self._last_seq: Optional[int] = None
        self._last_timestamp: Optional[float] = None

    def validate_reading(self, reading: ImuReading) -> ValidationResult:
        """Validate a complete IMU sample.

        Args:
            reading: IMU sample to validate.

        Returns:
            ValidationResult with validation status and any errors/warnings.
        """
        result = ValidationResult(is_valid=True)

        self._check_finite(reading, result)
        if result.is_valid:
            self._check_gyroscope(reading, result)
            self._check_reference_vectors(reading, result)
        self._check_timestamp(reading, result)
        self._check_sequence(reading, result)

        self._last_seq = reading.seq
        self._last_timestamp = reading.timestamp

        return result

    def _check_finite(self, reading: ImuReading, result: ValidationResult) -> None:
        """Check all values are finite (not NaN or Inf)."""
        names = ["gx", "gy", "gz", "ax", "ay", "az"]
        if reading.has_mag:
            names += ["mx", "my", "mz"]

        for name in names:
            val = getattr(reading, name)
            if not np.isfinite(val):
                result.add_error(f"Non-finite value in {name}: {val}")

    def _check_gyroscope(self, reading: ImuReading, result: ValidationResult) -> None:
        """Validate gyroscope range."""
        max_gyr = np.deg2rad(self._config.validation.gyro_range_dps)

        for name in ("gx", "gy", "gz"):
            val = getattr(reading, name)
            if abs(val) > max_gyr:
                result.add_error(f"{name} out of range: {np.rad2deg(val):.1f} deg/s")

    def _check_reference_vectors(self, reading: ImuReading, result: ValidationResult) -> None:
        """Flag zero reference vectors; the filter will hold its orientation."""
        if reading.acc_magnitude == 0.0:
            result.add_warning("Accelerometer vector is zero, update will be skipped")
        if reading.has_mag and reading.mag_magnitude == 0.0:
            result.add_warning("Magnetometer vector is zero, update will be skipped")

    def _check_timestamp(self, reading: ImuReading, result: ValidationResult) -> None:
        """Validate timestamp monotonicity."""
        if self._last_timestamp is None:
            return

        dt = reading.timestamp - self._last_timestamp
        if not np.isfinite(dt) or dt <= 0:
            result.add_error(f"Non-monotonic timestamp: dt={dt:.6f}s")

    def _check_sequence(self, reading: ImuReading, result: ValidationResult) -> None:
        """Check for sequence number gaps."""
        if self._last_seq is None:
            return

        expected = (self._last_seq + 1) % (2**32)
        if reading.seq != expected:
            gap = (reading.seq - self._last_seq) % (2**32)
            result.add_warning(f"Sequence gap: expected {expected}, got {reading.seq} (gap: {gap})")

    def reset(self) -> None:
        """Reset validator state."""
        self._last_seq = None
        self._last_timestamp = None


class QuaternionValidator:
    """Validates the filter's quaternion after an update."""

    def __init__(self, config: Config):
        """Initialize validator with configuration.

        Args:
            config: System configuration with quaternion thresholds.
        """
        self._config = config

    def validate(self, q: Quaternion) -> ValidationResult:
        """Validate quaternion state.

        Args:
            q: Quaternion to validate.

        Returns:
            ValidationResult with status and any issues.
        """
        result = ValidationResult(is_valid=True)
        cfg = self._config.validation

        if not q.is_finite():
            result.add_error("Quaternion contains non-finite values")
            return result

        norm_error = abs(q.norm - 1.0)

        if norm_error > cfg.quaternion_divergence_threshold:
            result.add_error(f"Quaternion diverged: norm={q.norm:.4f}")
        elif norm_error > cfg.quaternion_norm_tolerance:
            result.add_warning(f"Quaternion norm drift: {q.norm:.6f}")

        return result


def validate_sample_period(period: float) -> ValidationResult:
    """Validate a filter sample period.

    Args:
        period: Seconds between updates.

    Returns:
        ValidationResult with status.
    """
    result = ValidationResult(is_valid=True)

    if not np.isfinite(period):
        result.add_error(f"Non-finite sample period: {period}")
    elif period <= 0:
        result.add_error(f"Non-positive sample period: {period}")

    return result
