"""Tests for configuration loading."""

import pytest

from madgwick_ahrs.core.config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    Config,
    FilterConfig,
    load_config,
)


class TestDefaults:
    """Tests for built-in defaults."""

    def test_filter_defaults(self, config):
        """Default filter runs at 50 Hz with beta 1."""
        assert config.filter.beta == 1.0
        assert config.filter.sample_rate_hz == 50.0
        assert config.filter.use_magnetometer
        assert config.filter.sample_period == pytest.approx(0.02)

    def test_explicit_period_wins(self):
        """An explicit period overrides the rate."""
        cfg = FilterConfig(sample_rate_hz=100.0, sample_period_s=0.005)
        assert cfg.sample_period == 0.005

    def test_non_positive_rate_rejected(self):
        """A derived period needs a positive rate."""
        cfg = FilterConfig(sample_rate_hz=0.0)
        with pytest.raises(ValueError):
            cfg.sample_period

    def test_packaged_default_file_exists(self):
        """The default YAML file ships with the package."""
        assert DEFAULT_CONFIG_PATH.exists()

    def test_packaged_default_matches_dataclasses(self, monkeypatch):
        """Loading the packaged file gives the built-in defaults."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert load_config() == Config()


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_load_partial_file(self, tmp_path):
        """Missing sections and keys fall back to defaults."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "filter:\n"
            "  beta: 0.1\n"
            "  sample_rate_hz: 200\n"
            "source:\n"
            "  mock:\n"
            "    yaw_rate_dps: 15.0\n",
            encoding="utf-8",
        )

        config = load_config(str(path))

        assert config.filter.beta == 0.1
        assert config.filter.sample_period == pytest.approx(0.005)
        assert config.source.kind == "mock"
        assert config.source.mock.yaw_rate_dps == 15.0
        assert config.source.mock.seed == 42
        assert config.output.emit_every == 50

    def test_unknown_keys_ignored(self, tmp_path):
        """Unknown keys should not break loading."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "filter:\n"
            "  beta: 0.3\n"
            "  zeta: 0.01\n"
            "telemetry:\n"
            "  port: 5000\n",
            encoding="utf-8",
        )

        config = load_config(str(path))

        assert config.filter.beta == 0.3
        assert not hasattr(config.filter, "zeta")

    def test_empty_file(self, tmp_path):
        """An empty file gives the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(str(path)) == Config()

    def test_non_mapping_rejected(self, tmp_path):
        """A YAML list at the root is an error."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        """A missing file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_environment_variable(self, tmp_path, monkeypatch):
        """The environment variable is used when no path is given."""
        path = tmp_path / "env.yaml"
        path.write_text("filter:\n  beta: 0.042\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert load_config().filter.beta == 0.042

    def test_explicit_path_beats_environment(self, tmp_path, monkeypatch):
        """An explicit path takes precedence over the environment."""
        env_path = tmp_path / "env.yaml"
        env_path.write_text("filter:\n  beta: 0.042\n", encoding="utf-8")
        arg_path = tmp_path / "arg.yaml"
        arg_path.write_text("filter:\n  beta: 0.7\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_path))

        assert load_config(str(arg_path)).filter.beta == 0.7
