#!/usr/bin/env python3
"""Command-line driver for the Madgwick AHRS filter.

Reads samples from a mock generator or a recorded CSV log, runs one
filter update per sample and writes JSON-formatted orientation lines to
stdout.
"""

import argparse
import json
import logging
import signal
import sys
from typing import Optional, TextIO

from .core import Config, load_config, FusionState, ImuReading
from .core.validation import SensorValidator, QuaternionValidator, validate_sample_period
from .communication import SourceError, open_source
from .fusion import MadgwickAHRS
from .monitoring import PerformanceMonitor

logger = logging.getLogger(__name__)

SHUTDOWN_REQUESTED = False


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    global SHUTDOWN_REQUESTED
    SHUTDOWN_REQUESTED = True
    logger.info("Shutdown requested")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: If True, set DEBUG level; otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _holds_orientation(reading: ImuReading, use_mag: bool) -> bool:
    """True when the filter will skip this sample for a zero reference vector."""
    if reading.acc_magnitude == 0.0:
        return True
    return use_mag and reading.has_mag and reading.mag_magnitude == 0.0


def run_filter_loop(
    config: Config,
    out: Optional[TextIO] = None,
    max_samples: Optional[int] = None,
) -> int:
    """Run the filter over every sample the configured source yields.

    Args:
        config: System configuration.
        out: Stream receiving one JSON line per emitted state, stdout
            if omitted.
        max_samples: Stop after this many samples, if given.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    if out is None:
        out = sys.stdout

    try:
        source = open_source(config)
    except SourceError as e:
        logger.error("Failed to create sample source: %s", e)
        return 1

    ahrs = MadgwickAHRS(config.filter.sample_period, config.filter.beta)
    validator = SensorValidator(config)
    quat_validator = QuaternionValidator(config)
    monitor = PerformanceMonitor(config)

    use_mag = config.filter.use_magnetometer
    emit_every = max(1, config.output.emit_every)
    validation_failures = 0
    skipped_updates = 0
    iteration = 0

    try:
        source.open()
        logger.info(
            "Starting filter: sample period %.4f s, beta %.3f, %s",
            ahrs.sample_period, ahrs.beta, "MARG" if use_mag else "IMU-only"
        )

        while not SHUTDOWN_REQUESTED:
            if max_samples is not None and iteration >= max_samples:
                break

            reading = source.read_measurement()
            if reading is None:
                logger.info("Source exhausted")
                break

            if config.validation.enabled:
                validation = validator.validate_reading(reading)
                if not validation.is_valid:
                    validation_failures += 1
                    for error in validation.errors:
                        logger.warning("Validation: %s", error)
                    continue

                for warning in validation.warnings:
                    logger.debug("Validation warning: %s", warning)

            if _holds_orientation(reading, use_mag):
                skipped_updates += 1

            monitor.start_iteration()
            if use_mag and reading.has_mag:
                ahrs.update_marg(
                    reading.gx, reading.gy, reading.gz,
                    reading.ax, reading.ay, reading.az,
                    reading.mx, reading.my, reading.mz,
                )
            else:
                ahrs.update_imu(
                    reading.gx, reading.gy, reading.gz,
                    reading.ax, reading.ay, reading.az,
                )
            monitor.end_iteration(reading.timestamp)
            iteration += 1

            quaternion = ahrs.get_quaternion()
            q_validation = quat_validator.validate(quaternion)
            for error in q_validation.errors:
                logger.warning("Filter state: %s", error)

            if iteration % emit_every == 0:
                state = FusionState(
                    quaternion=quaternion,
                    euler=ahrs.get_euler_angles(),
                    timestamp=reading.timestamp,
                    iteration=iteration,
                    skipped_updates=skipped_updates,
                )
                out.write(json.dumps(state.to_dict(degrees=config.output.degrees)) + "\n")
                out.flush()

    except SourceError as e:
        logger.error("Source error: %s", e)
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")

    finally:
        source.close()
        stats = monitor.get_stats()

        logger.info("Final statistics:")
        logger.info("  Updates: %d", stats.total_iterations)
        logger.info("  Effective rate: %.1f Hz", stats.effective_rate_hz)
        logger.info("  Mean update cost: %.3f ms", stats.mean_update_time_ms)
        logger.info("  Samples read: %d, malformed: %d",
                    source.stats.samples_read, source.stats.malformed_lines)
        logger.info("  Validation failures: %d", validation_failures)
        logger.info("  Skipped updates: %d", skipped_updates)

    return 0


def apply_overrides(config: Config, args: argparse.Namespace) -> None:
    """Apply command-line overrides to a loaded configuration."""
    if args.source is not None:
        config.source.kind = args.source
    if args.csv is not None:
        config.source.kind = "csv"
        config.source.csv_path = args.csv
    if args.beta is not None:
        config.filter.beta = args.beta
    if args.sample_rate is not None:
        config.filter.sample_rate_hz = args.sample_rate
        config.filter.sample_period_s = None
    if args.imu_only:
        config.filter.use_magnetometer = False


def main(argv: Optional[list] = None) -> int:
    """Application entry point.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        description="Madgwick AHRS orientation estimation"
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--source",
        choices=["mock", "csv"],
        default=None,
        help="Sample source (overrides configuration)",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Replay samples from this CSV log",
    )
    parser.add_argument(
        "--beta",
        type=float,
        default=None,
        help="Filter gain",
    )
    parser.add_argument(
        "--sample-rate",
        type=float,
        default=None,
        help="Sample rate in Hz",
    )
    parser.add_argument(
        "--imu-only",
        action="store_true",
        help="Ignore magnetometer data",
    )
    parser.add_argument(
        "--max-samples",
        type=int,
        default=None,
        help="Stop after this many samples",
    )
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except Exception as e:
        logger.error("Failed to load configuration: %s", e)
        return 1

    apply_overrides(config, args)

    try:
        sample_period = config.filter.sample_period
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        return 1

    period_check = validate_sample_period(sample_period)
    if not period_check.is_valid:
        for error in period_check.errors:
            logger.error("Configuration error: %s", error)
        return 1

    return run_filter_loop(config, max_samples=args.max_samples)


if __name__ == "__main__":
    sys.exit(main())
