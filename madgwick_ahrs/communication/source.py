"""Sample sources that feed IMU data to the filter."""

import logging
import time
from pathlib import Path
from typing import IO, Optional

import numpy as np

from ..core.types import ImuReading, SourceStats
from ..core.config import Config
from ..core.quaternion import QuaternionOps

logger = logging.getLogger(__name__)

# timestamp, seq, ax, ay, az, gx, gy, gz[, mx, my, mz]
CSV_MIN_FIELDS = 8
CSV_MAG_FIELDS = 11


class SourceError(Exception):
    """Base exception for sample source errors."""
    pass


class MockImuSource:
    """Synthetic IMU turning about the vertical axis.

    Emits gravity along +Z and an inclined magnetic field, both rotated
    into the sensor frame by the true attitude, plus Gaussian noise. The
    samples are consistent with the filter's earth frame, so a converged
    filter tracks the true yaw.
    """

    def __init__(self, config: Config):
        """Initialize mock source.

        Args:
            config: System configuration.
        """
        self._config = config
        self._mock_cfg = config.source.mock
        self._sample_period = config.filter.sample_period
        self._use_mag = config.filter.use_magnetometer
        self._stats = SourceStats()
        self._rng = np.random.default_rng(self._mock_cfg.seed)
        self._seq = 0
        self._is_open = False

        incl = np.deg2rad(self._mock_cfg.inclination_deg)
        self._gravity_earth = np.array([0.0, 0.0, self._mock_cfg.gravity])
        self._field_earth = self._mock_cfg.field_strength_ut * np.array(
            [np.cos(incl), 0.0, np.sin(incl)]
        )
        self._yaw_rate = np.deg2rad(self._mock_cfg.yaw_rate_dps)

    def open(self) -> None:
        """Start generating samples."""
        self._is_open = True
        self._seq = 0
        logger.info(
            "Mock source opened: %.1f Hz, yaw rate %.1f deg/s",
            1.0 / self._sample_period, self._mock_cfg.yaw_rate_dps
        )

    def close(self) -> None:
        """Stop generating samples."""
        self._is_open = False
        logger.info("Mock source closed")

    def true_yaw(self, seq: int) -> float:
        """Yaw of the simulated device at a sample index, in radians."""
        return self._yaw_rate * seq * self._sample_period

    def read_measurement(self) -> Optional[ImuReading]:
        """Generate the next synthetic sample.

        Returns:
            Synthetic IMU sample, or None once max_samples is reached.

        Raises:
            SourceError: If the source is not open.
        """
        if not self._is_open:
            raise SourceError("Mock source not open")

        max_samples = self._mock_cfg.max_samples
        if max_samples is not None and self._seq >= max_samples:
            return None

        if self._mock_cfg.realtime:
            time.sleep(self._sample_period)

        attitude = QuaternionOps.from_axis_angle(
            np.array([0.0, 0.0, 1.0]), self.true_yaw(self._seq)
        )
        to_sensor = QuaternionOps.conjugate(attitude)

        acc = QuaternionOps.rotate_vector(to_sensor, self._gravity_earth)
        acc = acc + self._rng.normal(0, self._mock_cfg.acc_noise, 3)
        gyr = np.array([0.0, 0.0, self._yaw_rate])
        gyr = gyr + self._rng.normal(0, self._mock_cfg.gyr_noise, 3)

        mag = (None, None, None)
        if self._use_mag:
            m = QuaternionOps.rotate_vector(to_sensor, self._field_earth)
            m = m + self._rng.normal(0, self._mock_cfg.mag_noise, 3)
            mag = (float(m[0]), float(m[1]), float(m[2]))

        reading = ImuReading(
            seq=self._seq,
            timestamp=self._seq * self._sample_period,
            gx=float(gyr[0]),
            gy=float(gyr[1]),
            gz=float(gyr[2]),
            ax=float(acc[0]),
            ay=float(acc[1]),
            az=float(acc[2]),
            mx=mag[0],
            my=mag[1],
            mz=mag[2],
        )
        self._seq += 1
        self._stats.samples_read += 1
        return reading

    @property
    def stats(self) -> SourceStats:
        """Get source statistics."""
        return self._stats

    @property
    def is_open(self) -> bool:
        """Check if source is open."""
        return self._is_open

    def __enter__(self) -> "MockImuSource":
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


class CsvImuSource:
    """Replays recorded samples from a comma-separated log.

    Each line holds ``timestamp, seq, ax, ay, az, gx, gy, gz`` optionally
    followed by ``mx, my, mz``; extra trailing columns are ignored. Blank
    lines and lines starting with ``#`` are skipped.
    """

    def __init__(self, path: str, use_magnetometer: bool = True):
        """Initialize CSV replay.

        Args:
            path: Path to the log file.
            use_magnetometer: If False, magnetometer columns are dropped.
        """
        self._path = Path(path)
        self._use_mag = use_magnetometer
        self._file: Optional[IO[str]] = None
        self._line_no = 0
        self._stats = SourceStats()

    def open(self) -> None:
        """Open the log file.

        Raises:
            SourceError: If the file cannot be opened.
        """
        if self._file is not None:
            return

        try:
            self._file = open(self._path, "r", encoding="utf-8")
        except OSError as e:
            raise SourceError(f"Failed to open {self._path}: {e}") from e
        self._line_no = 0
        logger.info("Replaying samples from %s", self._path)

    def close(self) -> None:
        """Close the log file."""
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.info("Replay closed after %d samples", self._stats.samples_read)

    def read_measurement(self) -> Optional[ImuReading]:
        """Read the next well-formed sample.

        Returns:
            Next IMU sample, or None at end of file.

        Raises:
            SourceError: If the source is not open.
        """
        if self._file is None:
            raise SourceError("CSV source not open")

        for line in self._file:
            self._line_no += 1
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            reading = self._parse_line(line)
            if reading is None:
                self._stats.malformed_lines += 1
                logger.debug("Malformed line %d in %s", self._line_no, self._path)
                continue

            self._stats.samples_read += 1
            return reading

        return None

    def _parse_line(self, line: str) -> Optional[ImuReading]:
        """Parse one CSV line, returning None if it is malformed."""
        fields = [f.strip() for f in line.split(",")]
        if len(fields) < CSV_MIN_FIELDS:
            return None

        try:
            timestamp = float(fields[0])
            seq = int(float(fields[1]))
            ax, ay, az, gx, gy, gz = (float(f) for f in fields[2:8])
            mag = (None, None, None)
            if self._use_mag and len(fields) >= CSV_MAG_FIELDS:
                mag = tuple(float(f) for f in fields[8:11])
        except ValueError:
            return None

        return ImuReading(
            seq=seq,
            timestamp=timestamp,
            gx=gx,
            gy=gy,
            gz=gz,
            ax=ax,
            ay=ay,
            az=az,
            mx=mag[0],
            my=mag[1],
            mz=mag[2],
        )

    @property
    def stats(self) -> SourceStats:
        """Get replay statistics."""
        return self._stats

    @property
    def is_open(self) -> bool:
        """Check if the log is open."""
        return self._file is not None

    def __enter__(self) -> "CsvImuSource":
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def open_source(config: Config):
    """Create the sample source selected in the configuration.

    Args:
        config: System configuration.

    Returns:
        An unopened MockImuSource or CsvImuSource.

    Raises:
        SourceError: If the source kind is unknown or a CSV path is missing.
    """
    kind = config.source.kind
    if kind == "mock":
        return MockImuSource(config)
    if kind == "csv":
        if not config.source.csv_path:
            raise SourceError("CSV source selected but no csv_path configured")
        return CsvImuSource(
            config.source.csv_path,
            use_magnetometer=config.filter.use_magnetometer,
        )
    raise SourceError(f"Unknown source kind: {kind}")
