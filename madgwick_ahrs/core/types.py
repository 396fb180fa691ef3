"""Data types for AHRS orientation estimation."""

from dataclasses import dataclass, field
from typing import Iterator, Optional
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class ImuReading:
    """Single sample from the gyroscope, accelerometer and magnetometer.

    Units:
    - Gyroscope: rad/s
    - Accelerometer: any calibrated unit (only the direction is used)
    - Magnetometer: any calibrated unit, or None for 6-axis sources
    """
    seq: int
    timestamp: float  # seconds
    gx: float
    gy: float
    gz: float
    ax: float
    ay: float
    az: float
    mx: Optional[float] = None
    my: Optional[float] = None
    mz: Optional[float] = None

    @property
    def has_mag(self) -> bool:
        """True when all three magnetometer components are present."""
        return self.mx is not None and self.my is not None and self.mz is not None

    @property
    def gyr(self) -> NDArray[np.float64]:
        """Gyroscope vector [gx, gy, gz]."""
        return np.array([self.gx, self.gy, self.gz], dtype=np.float64)

    @property
    def acc(self) -> NDArray[np.float64]:
        """Accelerometer vector [ax, ay, az]."""
        return np.array([self.ax, self.ay, self.az], dtype=np.float64)

    @property
    def mag(self) -> Optional[NDArray[np.float64]]:
        """Magnetometer vector [mx, my, mz], or None."""
        if not self.has_mag:
            return None
        return np.array([self.mx, self.my, self.mz], dtype=np.float64)

    @property
    def gyr_magnitude(self) -> float:
        """Magnitude of angular rate vector."""
        return float(np.linalg.norm(self.gyr))

    @property
    def acc_magnitude(self) -> float:
        """Magnitude of acceleration vector."""
        return float(np.linalg.norm(self.acc))

    @property
    def mag_magnitude(self) -> Optional[float]:
        """Magnitude of magnetic field vector, or None."""
        mag = self.mag
        if mag is None:
            return None
        return float(np.linalg.norm(mag))


@dataclass(frozen=True)
class Quaternion:
    """Orientation quaternion, sensor frame to earth frame.

    Convention: [w, x, y, z] where w is the scalar component. Instances
    are immutable, so handing one out never aliases filter state.
    """
    w: float
    x: float
    y: float
    z: float

    @classmethod
    def identity(cls) -> "Quaternion":
        """Return identity quaternion (no rotation)."""
        return cls(w=1.0, x=0.0, y=0.0, z=0.0)

    @classmethod
    def from_array(cls, arr: NDArray) -> "Quaternion":
        """Create from array-like [w, x, y, z]."""
        return cls(w=float(arr[0]), x=float(arr[1]),
                   y=float(arr[2]), z=float(arr[3]))

    def to_array(self) -> NDArray[np.float64]:
        """Convert to numpy array [w, x, y, z]."""
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    def as_float32(self) -> "Quaternion":
        """Return a copy with every component rounded to single precision."""
        return Quaternion.from_array(self.to_array().astype(np.float32))

    @property
    def norm(self) -> float:
        """Euclidean norm of quaternion."""
        return float(np.sqrt(self.w**2 + self.x**2 + self.y**2 + self.z**2))

    def is_valid(self, tolerance: float = 0.01) -> bool:
        """Check if quaternion is unit quaternion within tolerance."""
        return self.is_finite() and abs(self.norm - 1.0) <= tolerance

    def is_finite(self) -> bool:
        """Check all components are finite."""
        return bool(np.all(np.isfinite([self.w, self.x, self.y, self.z])))

    def normalized(self) -> "Quaternion":
        """Return normalized copy."""
        n = self.norm
        if n < 1e-10:
            return Quaternion.identity()
        return Quaternion(w=self.w/n, x=self.x/n, y=self.y/n, z=self.z/n)


@dataclass(frozen=True)
class EulerAngles:
    """Euler angles in radians.

    heading is the rotation about Y, attitude about Z and bank about X,
    applied in that order. Unpacks as (heading, attitude, bank).
    """
    heading: float
    attitude: float
    bank: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.heading, self.attitude, self.bank))

    @property
    def heading_deg(self) -> float:
        """Heading angle in degrees."""
        return float(np.rad2deg(self.heading))

    @property
    def attitude_deg(self) -> float:
        """Attitude angle in degrees."""
        return float(np.rad2deg(self.attitude))

    @property
    def bank_deg(self) -> float:
        """Bank angle in degrees."""
        return float(np.rad2deg(self.bank))


@dataclass
class FusionState:
    """Snapshot of the filter output after an update."""
    quaternion: Quaternion
    euler: EulerAngles
    timestamp: float
    iteration: int
    skipped_updates: int = 0

    def to_dict(self, degrees: bool = True) -> dict:
        """Convert to dictionary for JSON serialization."""
        if degrees:
            heading, attitude, bank = (
                self.euler.heading_deg,
                self.euler.attitude_deg,
                self.euler.bank_deg,
            )
        else:
            heading, attitude, bank = self.euler

        return {
            "timestamp": self.timestamp,
            "qw": self.quaternion.w,
            "qx": self.quaternion.x,
            "qy": self.quaternion.y,
            "qz": self.quaternion.z,
            "heading": heading,
            "attitude": attitude,
            "bank": bank,
            "q_norm": self.quaternion.norm,
            "iteration": self.iteration,
            "skipped": self.skipped_updates,
        }


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


@dataclass
class SourceStats:
    """Counters for a sample source."""
    samples_read: int = 0
    malformed_lines: int = 0
