"""Madgwick gradient-descent orientation filter.

Fuses gyroscope, accelerometer and (optionally) magnetometer samples into
a unit quaternion describing the sensor frame relative to the earth frame
(gravity down, magnetic north). Each update integrates the gyro rate and
pulls the estimate toward the accelerometer/magnetometer references by one
normalized gradient step scaled by beta.

The filter keeps no history and does no locking. Callers running it from
several threads must serialize updates and reads themselves, and must not
change beta or the sample period while an update is in progress.
"""

import logging
import math
from typing import Optional

from ..core.types import Quaternion, EulerAngles
from ..core.quaternion import QuaternionOps

logger = logging.getLogger(__name__)


class MadgwickAHRS:
    """Madgwick AHRS filter with MARG and IMU-only updates.

    The quaternion is stored in single precision. Inputs are not
    validated: non-finite values or a non-positive sample period will
    corrupt the estimate. The one guarded case is a zero accelerometer or
    magnetometer vector, which skips the update and holds the last
    orientation.
    """

    def __init__(
        self,
        sample_period: float,
        beta: float = 1.0,
        quaternion: Optional[Quaternion] = None,
    ):
        """Initialize the filter.

        Args:
            sample_period: Seconds between successive updates.
            beta: Algorithm gain. Larger values trust the reference
                vectors more and converge faster at the cost of noise.
            quaternion: Initial orientation, identity if omitted. Stored
                as given, without normalization.
        """
        self._sample_period = sample_period
        self._beta = beta
        if quaternion is None:
            quaternion = Quaternion.identity()
        self._quaternion = quaternion.as_float32()

    @property
    def quaternion(self) -> Quaternion:
        """Current orientation (immutable snapshot)."""
        return self._quaternion

    @property
    def sample_period(self) -> float:
        return self._sample_period

    @sample_period.setter
    def sample_period(self, value: float) -> None:
        self._sample_period = value

    @property
    def beta(self) -> float:
        return self._beta

    @beta.setter
    def beta(self, value: float) -> None:
        self._beta = value

    def get_quaternion(self) -> Quaternion:
        """Return the current orientation quaternion (w, x, y, z)."""
        return self._quaternion

    def get_sample_period(self) -> float:
        return self._sample_period

    def set_sample_period(self, sample_period: float) -> None:
        self._sample_period = sample_period

    def get_beta(self) -> float:
        return self._beta

    def set_beta(self, beta: float) -> None:
        self._beta = beta

    def get_euler_angles(self) -> EulerAngles:
        """Return (heading, attitude, bank) in radians for the current estimate."""
        return QuaternionOps.to_euler(self._quaternion)

    def update(
        self,
        gx: float, gy: float, gz: float,
        ax: float, ay: float, az: float,
        mx: Optional[float] = None,
        my: Optional[float] = None,
        mz: Optional[float] = None,
    ) -> None:
        """Run one filter step, with or without magnetometer.

        Args:
            gx, gy, gz: Gyroscope rates in rad/s.
            ax, ay, az: Accelerometer in any calibrated unit.
            mx, my, mz: Magnetometer in any calibrated unit. Omit all
                three for an IMU-only step.

        Raises:
            TypeError: If only some of the magnetometer components are given.
        """
        mag = (mx, my, mz)
        if all(m is None for m in mag):
            self.update_imu(gx, gy, gz, ax, ay, az)
        elif any(m is None for m in mag):
            raise TypeError("Magnetometer needs all of mx, my, mz or none of them")
        else:
            self.update_marg(gx, gy, gz, ax, ay, az, mx, my, mz)

    def update_marg(
        self,
        gx: float, gy: float, gz: float,
        ax: float, ay: float, az: float,
        mx: float, my: float, mz: float,
    ) -> None:
        """Filter step using gyroscope, accelerometer and magnetometer.

        Args:
            gx, gy, gz: Gyroscope rates in rad/s.
            ax, ay, az: Accelerometer in any calibrated unit.
            mx, my, mz: Magnetometer in any calibrated unit.
        """
        q = self._quaternion
        q1, q2, q3, q4 = q.w, q.x, q.y, q.z

        # Normalise accelerometer measurement
        norm = math.sqrt(ax * ax + ay * ay + az * az)
        if norm == 0.0:
            logger.debug("Zero accelerometer vector, MARG update skipped")
            return
        ax, ay, az = ax / norm, ay / norm, az / norm

        # Normalise magnetometer measurement
        norm = math.sqrt(mx * mx + my * my + mz * mz)
        if norm == 0.0:
            logger.debug("Zero magnetometer vector, MARG update skipped")
            return
        mx, my, mz = mx / norm, my / norm, mz / norm

        # Auxiliary variables to avoid repeated arithmetic
        _2q1mx = 2.0 * q1 * mx
        _2q1my = 2.0 * q1 * my
        _2q1mz = 2.0 * q1 * mz
        _2q2mx = 2.0 * q2 * mx
        _2q1 = 2.0 * q1
        _2q2 = 2.0 * q2
        _2q3 = 2.0 * q3
        _2q4 = 2.0 * q4
        _2q1q3 = 2.0 * q1 * q3
        _2q3q4 = 2.0 * q3 * q4
        q1q1 = q1 * q1
        q1q2 = q1 * q2
        q1q3 = q1 * q3
        q1q4 = q1 * q4
        q2q2 = q2 * q2
        q2q3 = q2 * q3
        q2q4 = q2 * q4
        q3q3 = q3 * q3
        q3q4 = q3 * q4
        q4q4 = q4 * q4

        # Reference direction of Earth's magnetic field
        hx = (mx * q1q1 - _2q1my * q4 + _2q1mz * q3 + mx * q2q2
              + _2q2 * my * q3 + _2q2 * mz * q4 - mx * q3q3 - mx * q4q4)
        hy = (_2q1mx * q4 + my * q1q1 - _2q1mz * q2 + _2q2mx * q3
              - my * q2q2 + my * q3q3 + _2q3 * mz * q4 - my * q4q4)
        _2bx = math.sqrt(hx * hx + hy * hy)
        _2bz = (-_2q1mx * q3 + _2q1my * q2 + mz * q1q1 + _2q2mx * q4
                - mz * q2q2 + _2q3 * my * q4 - mz * q3q3 + mz * q4q4)
        _4bx = 2.0 * _2bx
        _4bz = 2.0 * _2bz

        # Objective function residuals
        fa_x = 2.0 * q2q4 - _2q1q3 - ax
        fa_y = 2.0 * q1q2 + _2q3q4 - ay
        fa_z = 1.0 - 2.0 * q2q2 - 2.0 * q3q3 - az
        fm_x = _2bx * (0.5 - q3q3 - q4q4) + _2bz * (q2q4 - q1q3) - mx
        fm_y = _2bx * (q2q3 - q1q4) + _2bz * (q1q2 + q3q4) - my
        fm_z = _2bx * (q1q3 + q2q4) + _2bz * (0.5 - q2q2 - q3q3) - mz

        # Gradient decent algorithm corrective step
        s1 = (-_2q3 * fa_x + _2q2 * fa_y
              - _2bz * q3 * fm_x
              + (-_2bx * q4 + _2bz * q2) * fm_y
              + _2bx * q3 * fm_z)
        s2 = (_2q4 * fa_x + _2q1 * fa_y - 4.0 * q2 * fa_z
              + _2bz * q4 * fm_x
              + (_2bx * q3 + _2bz * q1) * fm_y
              + (_2bx * q4 - _4bz * q2) * fm_z)
        s3 = (-_2q1 * fa_x + _2q4 * fa_y - 4.0 * q3 * fa_z
              + (-_4bx * q3 - _2bz * q1) * fm_x
              + (_2bx * q2 + _2bz * q4) * fm_y
              + (_2bx * q1 - _4bz * q3) * fm_z)
        s4 = (_2q2 * fa_x + _2q3 * fa_y
              + (-_4bx * q4 + _2bz * q2) * fm_x
              + (-_2bx * q1 + _2bz * q3) * fm_y
              + _2bx * q2 * fm_z)

        self._integrate(q, gx, gy, gz, s1, s2, s3, s4)

    def update_imu(
        self,
        gx: float, gy: float, gz: float,
        ax: float, ay: float, az: float,
    ) -> None:
        """Filter step using gyroscope and accelerometer only.

        Heading is not corrected and drifts with the gyro.

        Args:
            gx, gy, gz: Gyroscope rates in rad/s.
            ax, ay, az: Accelerometer in any calibrated unit.
        """
        q = self._quaternion
        q1, q2, q3, q4 = q.w, q.x, q.y, q.z

        # Normalise accelerometer measurement
        norm = math.sqrt(ax * ax + ay * ay + az * az)
        if norm == 0.0:
            logger.debug("Zero accelerometer vector, IMU update skipped")
            return
        ax, ay, az = ax / norm, ay / norm, az / norm

        # Auxiliary variables to avoid repeated arithmetic
        _2q1 = 2.0 * q1
        _2q2 = 2.0 * q2
        _2q3 = 2.0 * q3
        _2q4 = 2.0 * q4
        _4q1 = 4.0 * q1
        _4q2 = 4.0 * q2
        _4q3 = 4.0 * q3
        _8q2 = 8.0 * q2
        _8q3 = 8.0 * q3
        q1q1 = q1 * q1
        q2q2 = q2 * q2
        q3q3 = q3 * q3
        q4q4 = q4 * q4

        # Gradient decent algorithm corrective step
        s1 = _4q1 * q3q3 + _2q3 * ax + _4q1 * q2q2 - _2q2 * ay
        s2 = (_4q2 * q4q4 - _2q4 * ax + 4.0 * q1q1 * q2 - _2q1 * ay - _4q2
              + _8q2 * q2q2 + _8q2 * q3q3 + _4q2 * az)
        s3 = (4.0 * q1q1 * q3 + _2q1 * ax + _4q3 * q4q4 - _2q4 * ay - _4q3
              + _8q3 * q2q2 + _8q3 * q3q3 + _4q3 * az)
        s4 = 4.0 * q2q2 * q4 - _2q2 * ax + 4.0 * q3q3 * q4 - _2q3 * ay

        self._integrate(q, gx, gy, gz, s1, s2, s3, s4)

    def _integrate(
        self,
        q: Quaternion,
        gx: float, gy: float, gz: float,
        s1: float, s2: float, s3: float, s4: float,
    ) -> None:
        """Combine gyro rate and gradient step, integrate and renormalize."""
        # Normalise step magnitude. A zero gradient means the estimate
        # already agrees with the references.
        norm = math.sqrt(s1 * s1 + s2 * s2 + s3 * s3 + s4 * s4)
        if norm == 0.0:
            s1 = s2 = s3 = s4 = 0.0
        else:
            s1, s2, s3, s4 = s1 / norm, s2 / norm, s3 / norm, s4 / norm

        # Rate of change of quaternion from gyroscope
        q_dot = QuaternionOps.multiply(q, Quaternion(w=0.0, x=gx, y=gy, z=gz))
        beta = self._beta
        dt = self._sample_period

        # Integrate to yield quaternion
        q1 = q.w + (0.5 * q_dot.w - beta * s1) * dt
        q2 = q.x + (0.5 * q_dot.x - beta * s2) * dt
        q3 = q.y + (0.5 * q_dot.y - beta * s3) * dt
        q4 = q.z + (0.5 * q_dot.z - beta * s4) * dt

        norm = math.sqrt(q1 * q1 + q2 * q2 + q3 * q3 + q4 * q4)
        self._quaternion = Quaternion(
            w=q1 / norm, x=q2 / norm, y=q3 / norm, z=q4 / norm
        ).as_float32()
