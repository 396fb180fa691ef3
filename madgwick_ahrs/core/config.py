"""Configuration management for the AHRS filter and its driver."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

import yaml

CONFIG_ENV_VAR = "MADGWICK_CONFIG_PATH"
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "default.yaml"


@dataclass
class FilterConfig:
    """Madgwick filter tuning."""
    sample_rate_hz: float = 50.0
    sample_period_s: Optional[float] = None
    beta: float = 1.0
    use_magnetometer: bool = True

    @property
    def sample_period(self) -> float:
        """Seconds between updates, explicit or derived from the rate.

        Raises:
            ValueError: If derived from a non-positive sample rate.
        """
        if self.sample_period_s is not None:
            return float(self.sample_period_s)
        rate = float(self.sample_rate_hz)
        if rate <= 0:
            raise ValueError(f"sample_rate_hz must be positive, got {rate}")
        return 1.0 / rate


@dataclass
class MockSourceConfig:
    """Synthetic sample generator configuration."""
    seed: int = 42
    yaw_rate_dps: float = 0.0
    gravity: float = 9.81
    field_strength_ut: float = 50.0
    inclination_deg: float = 60.0
    acc_noise: float = 0.01
    gyr_noise: float = 0.001
    mag_noise: float = 0.1
    realtime: bool = False
    max_samples: Optional[int] = None


@dataclass
class SourceConfig:
    """Sample source selection."""
    kind: str = "mock"
    csv_path: Optional[str] = None
    mock: MockSourceConfig = field(default_factory=MockSourceConfig)


@dataclass
class ValidationConfig:
    """Driver-side input checks."""
    enabled: bool = True
    gyro_range_dps: float = 2000.0
    quaternion_norm_tolerance: float = 0.01
    quaternion_divergence_threshold: float = 0.1


@dataclass
class OutputConfig:
    """JSON output settings."""
    emit_every: int = 50
    degrees: bool = True


@dataclass
class MonitoringConfig:
    """Update loop monitoring configuration."""
    window_size: int = 1000
    log_interval_s: float = 10.0
    jitter_warning_ms: float = 5.0


@dataclass
class Config:
    """Complete configuration."""
    filter: FilterConfig = field(default_factory=FilterConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def _dict_to_dataclass(data: dict, cls: type) -> object:
    """Recursively convert dictionary to dataclass, ignoring unknown keys."""
    if not hasattr(cls, "__dataclass_fields__"):
        return data

    defaults = cls()
    kwargs = {}

    for key, value in data.items():
        if key not in cls.__dataclass_fields__:
            continue
        current = getattr(defaults, key)
        if hasattr(current, "__dataclass_fields__") and isinstance(value, dict):
            kwargs[key] = _dict_to_dataclass(value, type(current))
        else:
            kwargs[key] = value

    return cls(**kwargs)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, the
            MADGWICK_CONFIG_PATH environment variable is consulted, then
            the packaged default file.

    Returns:
        Configuration object with all settings.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValueError: If the file does not hold a YAML mapping.
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            config_path = env_path
        elif DEFAULT_CONFIG_PATH.exists():
            config_path = str(DEFAULT_CONFIG_PATH)
        else:
            return Config()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return Config()

    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {config_path}")

    return _dict_to_dataclass(data, Config)
