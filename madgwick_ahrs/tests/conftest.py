"""Pytest fixtures for AHRS filter tests."""

import pytest
import numpy as np

from madgwick_ahrs.core.config import Config
from madgwick_ahrs.core.types import ImuReading, Quaternion
from madgwick_ahrs.core.quaternion import QuaternionOps

# Magnetic inclination used by the reference-consistent fixtures
INCLINATION = np.deg2rad(60)


@pytest.fixture
def config() -> Config:
    """Create default configuration for tests."""
    return Config()


@pytest.fixture
def stationary_reading() -> ImuReading:
    """Create a level, stationary sample consistent with identity attitude.

    Gravity along +Z and a magnetic field inclined by 60 degrees in the
    X-Z plane.
    """
    return ImuReading(
        seq=1,
        timestamp=1000.0,
        gx=0.0,
        gy=0.0,
        gz=0.0,
        ax=0.0,
        ay=0.0,
        az=9.81,
        mx=50.0 * np.cos(INCLINATION),
        my=0.0,
        mz=50.0 * np.sin(INCLINATION),
    )


@pytest.fixture
def imu_only_reading() -> ImuReading:
    """Create a stationary 6-axis sample without magnetometer."""
    return ImuReading(
        seq=1,
        timestamp=1000.0,
        gx=0.0, gy=0.0, gz=0.0,
        ax=0.0, ay=0.0, az=9.81,
    )


@pytest.fixture
def invalid_reading_nan() -> ImuReading:
    """Create an IMU sample with a NaN value."""
    return ImuReading(
        seq=1,
        timestamp=1000.0,
        gx=0.0, gy=0.0, gz=0.0,
        ax=float("nan"), ay=0.0, az=9.81,
        mx=20.0, my=5.0, mz=45.0,
    )


@pytest.fixture
def invalid_reading_inf() -> ImuReading:
    """Create an IMU sample with an Inf value."""
    return ImuReading(
        seq=1,
        timestamp=1000.0,
        gx=0.0, gy=0.0, gz=0.0,
        ax=0.0, ay=float("inf"), az=9.81,
        mx=20.0, my=5.0, mz=45.0,
    )


@pytest.fixture
def mag_reference() -> tuple:
    """Unit magnetic field consistent with identity attitude."""
    return (float(np.cos(INCLINATION)), 0.0, float(np.sin(INCLINATION)))


@pytest.fixture
def tilted_quaternion() -> Quaternion:
    """30 degree rotation about X, away from the level attitude."""
    return QuaternionOps.from_axis_angle(np.array([1.0, 0.0, 0.0]), np.deg2rad(30))


@pytest.fixture
def csv_log(tmp_path) -> str:
    """Write a small recorded log and return its path."""
    lines = [
        "# timestamp, seq, ax, ay, az, gx, gy, gz, mx, my, mz",
        "0.00,0,0.0,0.0,9.81,0.0,0.0,0.0,25.0,0.0,43.3",
        "0.02,1,0.0,0.0,9.81,0.0,0.0,0.0,25.0,0.0,43.3",
        "",
        "0.04,2,not-a-number,0.0,9.81,0.0,0.0,0.0,25.0,0.0,43.3",
        "0.06,3,0.0,0.0,9.81,0.0,0.0,0.0",
        "0.08,4,0.0,0.0",
        "0.10,5,0.0,0.0,9.81,0.0,0.0,0.0,25.0,0.0,43.3,24.5",
    ]
    path = tmp_path / "imu_log.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)
