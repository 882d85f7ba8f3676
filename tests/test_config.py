"""
Tests for configuration loading
"""
import pytest
from pydantic import ValidationError

from hand_replayer.config import DEFAULT_CFG, ReplayConfig, load_config


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "absent.yml"))
        assert config == ReplayConfig()
        assert config.allow_fallback_on_anomaly is False
        assert config.anomaly_log_dir == "logs"

    def test_packaged_defaults(self):
        config = load_config(DEFAULT_CFG)
        assert config.allow_fallback_on_anomaly is False
        assert config.anomaly_log_dir == "logs"

    def test_values_from_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(
            "replay:\n"
            "  allow_fallback_on_anomaly: true\n"
            f"  anomaly_log_dir: {tmp_path / 'anomalies'}\n",
            encoding="utf-8",
        )
        config = load_config(str(path))
        assert config.allow_fallback_on_anomaly is True
        assert config.anomaly_log_dir == str(tmp_path / "anomalies")

    def test_flat_layout(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("anomaly_log_dir: null\n", encoding="utf-8")
        assert load_config(str(path)).anomaly_log_dir is None

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("replay:\n  fallback: true\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(str(path))


class TestReplayConfig:
    def test_frozen(self):
        config = ReplayConfig()
        with pytest.raises(ValidationError):
            config.allow_fallback_on_anomaly = True
