"""
Pytest configuration and fixtures for tests
"""
import pytest

from hand_replayer.api import create_app
from hand_replayer.config import ReplayConfig
from hand_replayer.guards.anomaly_log import MemoryAnomalyLog


@pytest.fixture
def config_path(tmp_path):
    """Configuration file that keeps anomalies in memory"""
    path = tmp_path / "config.yml"
    path.write_text(
        "replay:\n"
        "  allow_fallback_on_anomaly: false\n"
        "  anomaly_log_dir: null\n",
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def app(config_path):
    """Create Flask application"""
    app = create_app(config_path)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create Flask test client"""
    with app.test_client() as client:
        yield client


@pytest.fixture
def config():
    return ReplayConfig(anomaly_log_dir=None)


@pytest.fixture
def anomaly_log():
    return MemoryAnomalyLog()
