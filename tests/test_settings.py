"""
Tests for environment-driven settings and logging setup
"""

import logging

from logger_config import setup_logging
from settings import AlertSettings, SimulationSettings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for key in (
            "TICK_INTERVAL_SECONDS",
            "HISTORY_CAPACITY",
            "SIMULATION_SEED",
            "ALERT_ESCALATION_THRESHOLD",
            "ALERT_REARM_THRESHOLD",
        ):
            monkeypatch.delenv(key, raising=False)

        simulation = SimulationSettings()
        alerts = AlertSettings()
        assert simulation.tick_interval_seconds == 5
        assert simulation.history_capacity == 20
        assert simulation.seed is None
        assert alerts.escalation_threshold == 85
        assert alerts.rearm_threshold == 80

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TICK_INTERVAL_SECONDS", "2")
        monkeypatch.setenv("SIMULATION_SEED", "42")
        monkeypatch.setenv("ALERT_ESCALATION_THRESHOLD", "90")

        assert SimulationSettings().tick_interval_seconds == 2
        assert SimulationSettings().seed == 42
        assert AlertSettings().escalation_threshold == 90

    def test_twilio_configured(self):
        alerts = AlertSettings(
            twilio_account_sid="AC1", twilio_auth_token="t", twilio_from_number="+1"
        )
        assert alerts.twilio_configured
        assert not AlertSettings(
            twilio_account_sid="", twilio_auth_token="", twilio_from_number=""
        ).twilio_configured

    def test_settings_dict_has_no_secrets(self):
        data = get_settings().to_dict()
        assert "twilio_auth_token" not in data
        assert "api_key" not in data
        assert data["version"] == "1.2.0"


def test_setup_logging_writes_files(tmp_path):
    logger = setup_logging(
        name="fleet_monitor_test",
        level=logging.DEBUG,
        log_to_file=True,
        log_to_console=False,
        logs_dir=tmp_path,
    )
    logger.error("pump seal failure")
    for handler in logger.handlers:
        handler.close()

    assert "pump seal failure" in (tmp_path / "fleet_monitor_test_errors.log").read_text()
