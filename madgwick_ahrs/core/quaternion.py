"""Quaternion operations and utilities."""

import math

import numpy as np
from numpy.typing import NDArray

from .types import Quaternion, EulerAngles

# Fraction of the quaternion's squared norm above which xy + zw is
# treated as the +/-90 degree attitude singularity.
SINGULARITY_THRESHOLD = 0.499


class QuaternionOps:
    """Static methods for quaternion operations."""

    @staticmethod
    def multiply(q1: Quaternion, q2: Quaternion) -> Quaternion:
        """Multiply two quaternions (Hamilton product).

        Args:
            q1: First quaternion.
            q2: Second quaternion.

        Returns:
            Product quaternion q1 * q2.
        """
        w = q1.w * q2.w - q1.x * q2.x - q1.y * q2.y - q1.z * q2.z
        x = q1.w * q2.x + q1.x * q2.w + q1.y * q2.z - q1.z * q2.y
        y = q1.w * q2.y - q1.x * q2.z + q1.y * q2.w + q1.z * q2.x
        z = q1.w * q2.z + q1.x * q2.y - q1.y * q2.x + q1.z * q2.w
        return Quaternion(w=w, x=x, y=y, z=z)

    @staticmethod
    def conjugate(q: Quaternion) -> Quaternion:
        """Compute quaternion conjugate.

        Args:
            q: Input quaternion.

        Returns:
            Conjugate quaternion.
        """
        return Quaternion(w=q.w, x=-q.x, y=-q.y, z=-q.z)

    @staticmethod
    def from_axis_angle(axis: NDArray[np.float64], angle: float) -> Quaternion:
        """Build a unit quaternion rotating by angle about axis.

        Args:
            axis: Rotation axis, any non-zero length.
            angle: Rotation angle in radians.

        Returns:
            Unit quaternion.

        Raises:
            ValueError: If the axis has zero length.
        """
        axis = np.asarray(axis, dtype=np.float64)
        axis_norm = np.linalg.norm(axis)
        if axis_norm == 0.0:
            raise ValueError("Rotation axis must be non-zero")
        axis = axis / axis_norm

        half = 0.5 * angle
        s = np.sin(half)
        return Quaternion(
            w=float(np.cos(half)),
            x=float(axis[0] * s),
            y=float(axis[1] * s),
            z=float(axis[2] * s),
        )

    @staticmethod
    def rotate_vector(q: Quaternion, v: NDArray[np.float64]) -> NDArray[np.float64]:
        """Rotate a 3-vector by q, computing q * v * q^-1.

        Args:
            q: Unit quaternion.
            v: Vector [x, y, z].

        Returns:
            Rotated vector.
        """
        p = Quaternion(w=0.0, x=float(v[0]), y=float(v[1]), z=float(v[2]))
        r = QuaternionOps.multiply(
            QuaternionOps.multiply(q, p), QuaternionOps.conjugate(q)
        )
        return np.array([r.x, r.y, r.z], dtype=np.float64)

    @staticmethod
    def angle_between(q1: Quaternion, q2: Quaternion) -> float:
        """Compute rotation angle between two quaternions.

        Args:
            q1: First quaternion.
            q2: Second quaternion.

        Returns:
            Angle in radians.
        """
        q1_conj = QuaternionOps.conjugate(q1)
        q_diff = QuaternionOps.multiply(q2, q1_conj)
        angle = 2.0 * np.arccos(np.clip(abs(q_diff.w), -1.0, 1.0))
        return float(angle)

    @staticmethod
    def to_euler(q: Quaternion) -> EulerAngles:
        """Convert quaternion to heading, attitude and bank.

        Works on non-unit quaternions: the squared norm is used as a
        correction factor. Near +/-90 degrees attitude the bank angle is
        pinned to zero and the whole rotation is reported as heading.

        Args:
            q: Quaternion, not necessarily normalized.

        Returns:
            Euler angles in radians.
        """
        w, x, y, z = q.w, q.x, q.y, q.z

        sqw = w * w
        sqx = x * x
        sqy = y * y
        sqz = z * z
        unit = sqx + sqy + sqz + sqw
        test = x * y + z * w

        # The singular branches report +/-pi for attitude, not +/-pi/2.
        if test > SINGULARITY_THRESHOLD * unit:
            return EulerAngles(
                heading=2.0 * math.atan2(x, w),
                attitude=math.pi,
                bank=0.0,
            )
        if test < -SINGULARITY_THRESHOLD * unit:
            return EulerAngles(
                heading=-2.0 * math.atan2(x, w),
                attitude=-math.pi,
                bank=0.0,
            )

        return EulerAngles(
            heading=math.atan2(2.0 * y * w - 2.0 * x * z, sqx - sqy - sqz + sqw),
            attitude=math.asin(2.0 * test / unit),
            bank=math.atan2(2.0 * x * w - 2.0 * y * z, -sqx + sqy - sqz + sqw),
        )
