"""Timing metrics for the filter update loop."""

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional, Deque
import numpy as np

from ..core.config import Config

logger = logging.getLogger(__name__)


@dataclass
class LoopMetrics:
    """Metrics for a single update."""
    timestamp: float
    dt_ms: float
    update_time_ms: float
    iteration: int


@dataclass
class PerformanceStats:
    """Aggregated loop statistics."""
    mean_dt_ms: float
    std_dt_ms: float
    max_dt_ms: float
    min_dt_ms: float
    mean_update_time_ms: float
    max_update_time_ms: float
    effective_rate_hz: float
    cadence_error_ms: float
    dropped_samples: int
    total_iterations: int


class PerformanceMonitor:
    """Tracks update cost and sample cadence against the filter period.

    The filter integrates with a fixed sample period and cannot see when
    samples arrive late or get lost. This monitor compares sample
    timestamps with that period and reports the mismatch.
    """

    def __init__(self, config: Config):
        """Initialize performance monitor.

        Args:
            config: System configuration with monitoring settings.
        """
        self._mon_cfg = config.monitoring

        window = self._mon_cfg.window_size
        self._dt_history: Deque[float] = deque(maxlen=window)
        self._update_time_history: Deque[float] = deque(maxlen=window)

        self._iteration = 0
        self._dropped_samples = 0
        self._last_log_time = time.time()
        self._last_timestamp: Optional[float] = None
        self._update_start_time: Optional[float] = None

        self._target_dt_ms = config.filter.sample_period * 1000.0
        self._jitter_threshold = self._mon_cfg.jitter_warning_ms

    def start_iteration(self) -> None:
        """Mark the start of a filter update."""
        self._update_start_time = time.perf_counter()

    def end_iteration(self, timestamp: float) -> LoopMetrics:
        """Mark the end of a filter update and compute metrics.

        Args:
            timestamp: Timestamp of the sample just processed.

        Returns:
            Metrics for this update.
        """
        now = time.perf_counter()
        update_time_ms = 0.0

        if self._update_start_time is not None:
            update_time_ms = (now - self._update_start_time) * 1000

        dt_ms = 0.0
        if self._last_timestamp is not None:
            dt_ms = (timestamp - self._last_timestamp) * 1000
            self._dt_history.append(dt_ms)

            expected_samples = int(dt_ms / self._target_dt_ms + 0.5)
            if expected_samples > 1:
                self._dropped_samples += expected_samples - 1

            if abs(dt_ms - self._target_dt_ms) > self._jitter_threshold:
                logger.debug(
                    "Cadence mismatch: dt=%.2f ms (sample period=%.2f ms)",
                    dt_ms, self._target_dt_ms
                )

        self._update_time_history.append(update_time_ms)
        self._last_timestamp = timestamp
        self._iteration += 1

        self._maybe_log_stats()

        return LoopMetrics(
            timestamp=timestamp,
            dt_ms=dt_ms,
            update_time_ms=update_time_ms,
            iteration=self._iteration,
        )

    def _maybe_log_stats(self) -> None:
        """Log statistics periodically."""
        now = time.time()
        interval = self._mon_cfg.log_interval_s

        if now - self._last_log_time >= interval:
            stats = self.get_stats()
            logger.info(
                "Performance: rate=%.1f Hz, dt=%.2f+/-%.2f ms, "
                "update=%.3f ms, dropped=%d",
                stats.effective_rate_hz,
                stats.mean_dt_ms,
                stats.std_dt_ms,
                stats.mean_update_time_ms,
                stats.dropped_samples,
            )
            self._last_log_time = now

    def get_stats(self) -> PerformanceStats:
        """Get aggregated loop statistics.

        Returns:
            PerformanceStats with current metrics.
        """
        if not self._dt_history:
            return PerformanceStats(
                mean_dt_ms=0.0,
                std_dt_ms=0.0,
                max_dt_ms=0.0,
                min_dt_ms=0.0,
                mean_update_time_ms=0.0,
                max_update_time_ms=0.0,
                effective_rate_hz=0.0,
                cadence_error_ms=0.0,
                dropped_samples=self._dropped_samples,
                total_iterations=self._iteration,
            )

        dt_array = np.array(self._dt_history)
        update_array = np.array(self._update_time_history)

        mean_dt = float(np.mean(dt_array))
        effective_rate = 1000.0 / mean_dt if mean_dt > 0 else 0.0

        return PerformanceStats(
            mean_dt_ms=mean_dt,
            std_dt_ms=float(np.std(dt_array)),
            max_dt_ms=float(np.max(dt_array)),
            min_dt_ms=float(np.min(dt_array)),
            mean_update_time_ms=float(np.mean(update_array)),
            max_update_time_ms=float(np.max(update_array)),
            effective_rate_hz=effective_rate,
            cadence_error_ms=mean_dt - self._target_dt_ms,
            dropped_samples=self._dropped_samples,
            total_iterations=self._iteration,
        )

    def reset(self) -> None:
        """Reset all metrics."""
        self._dt_history.clear()
        self._update_time_history.clear()
        self._iteration = 0
        self._dropped_samples = 0
        self._last_timestamp = None
        self._update_start_time = None
