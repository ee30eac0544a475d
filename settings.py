"""
Machine Fleet Monitor Settings v1.2.0
Centralized configuration from environment variables

All tunables (tick cadence, alert thresholds, Twilio/Gemini credentials)
come from the environment. Sensitive data MUST come from environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _get_env(key: str, default: str = "", required: bool = False) -> str:
    """Get environment variable with optional requirement enforcement."""
    value = os.getenv(key, default)
    if required and not value:
        raise ValueError(f"Required environment variable {key} is not set!")
    return value


def _get_env_int(key: str, default: int) -> int:
    """Get integer environment variable."""
    return int(os.getenv(key, str(default)))


def _get_env_optional_int(key: str) -> Optional[int]:
    """Get integer environment variable, None when unset or empty."""
    value = os.getenv(key, "")
    return int(value) if value.strip() else None


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    return os.getenv(key, str(default)).lower() in ("true", "1", "yes")


def _get_env_list(key: str, default: str = "", separator: str = ",") -> List[str]:
    """Get list from comma-separated environment variable."""
    value = os.getenv(key, default)
    return [item.strip() for item in value.split(separator) if item.strip()]


# =============================================================================
# SIMULATION SETTINGS
# =============================================================================
@dataclass
class SimulationSettings:
    """Telemetry simulation and tick cadence."""

    tick_interval_seconds: int = field(
        default_factory=lambda: _get_env_int("TICK_INTERVAL_SECONDS", 5)
    )
    history_capacity: int = field(
        default_factory=lambda: _get_env_int("HISTORY_CAPACITY", 20)
    )
    # Fixed seed makes the random walk reproducible (demos, bug reports)
    seed: Optional[int] = field(
        default_factory=lambda: _get_env_optional_int("SIMULATION_SEED")
    )


# =============================================================================
# ALERT SETTINGS
# =============================================================================
@dataclass
class AlertSettings:
    """Alert state machine and SMS notification configuration."""

    # Hysteresis band: escalate above this, re-arm below rearm_threshold
    escalation_threshold: int = field(
        default_factory=lambda: _get_env_int("ALERT_ESCALATION_THRESHOLD", 85)
    )
    rearm_threshold: int = field(
        default_factory=lambda: _get_env_int("ALERT_REARM_THRESHOLD", 80)
    )
    alert_list_cap: int = field(
        default_factory=lambda: _get_env_int("ALERT_LIST_CAP", 50)
    )
    analysis_workers: int = field(
        default_factory=lambda: _get_env_int("ANALYSIS_WORKERS", 4)
    )

    # Twilio SMS
    twilio_account_sid: str = field(
        default_factory=lambda: _get_env("TWILIO_ACCOUNT_SID", "")
    )
    twilio_auth_token: str = field(
        default_factory=lambda: _get_env("TWILIO_AUTH_TOKEN", "")
    )
    twilio_from_number: str = field(
        default_factory=lambda: _get_env("TWILIO_FROM_NUMBER", "")
    )
    # Optional endpoint registered at startup; can be changed through the API
    sms_to_number: str = field(default_factory=lambda: _get_env("ALERT_SMS_TO", ""))

    @property
    def twilio_configured(self) -> bool:
        """Check if Twilio is properly configured."""
        return bool(
            self.twilio_account_sid
            and self.twilio_auth_token
            and self.twilio_from_number
        )


# =============================================================================
# GEMINI SETTINGS
# =============================================================================
@dataclass
class GeminiSettings:
    """Google Gemini text-generation configuration."""

    api_key: str = field(default_factory=lambda: _get_env("GOOGLE_API_KEY", ""))
    model: str = field(
        default_factory=lambda: _get_env("GEMINI_MODEL", "gemini-3-flash-preview")
    )
    report_model: str = field(
        default_factory=lambda: _get_env(
            "GEMINI_REPORT_MODEL", "gemini-3-flash-preview"
        )
    )
    # Slower model with an extended thinking budget for on-demand deep diagnostics
    diagnostic_model: str = field(
        default_factory=lambda: _get_env(
            "GEMINI_DIAGNOSTIC_MODEL", "gemini-3-pro-preview"
        )
    )
    diagnostic_thinking_budget: int = field(
        default_factory=lambda: _get_env_int("GEMINI_THINKING_BUDGET", 32768)
    )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


# =============================================================================
# APPLICATION SETTINGS
# =============================================================================
@dataclass
class AppSettings:
    """General application settings."""

    debug: bool = field(default_factory=lambda: _get_env_bool("DEBUG", False))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_to_file: bool = field(
        default_factory=lambda: _get_env_bool("LOG_TO_FILE", False)
    )
    version: str = "1.2.0"

    logs_dir: Path = field(default_factory=lambda: Path(__file__).parent / "logs")

    allowed_origins: List[str] = field(
        default_factory=lambda: _get_env_list(
            "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
        )
    )


# =============================================================================
# GLOBAL SETTINGS INSTANCE
# =============================================================================
class Settings:
    """Global settings container - singleton pattern."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize all settings."""
        self.simulation = SimulationSettings()
        self.alerts = AlertSettings()
        self.gemini = GeminiSettings()
        self.app = AppSettings()

    def validate(self) -> List[str]:
        """Validate settings and return list of warnings."""
        warnings = []

        if self.alerts.rearm_threshold >= self.alerts.escalation_threshold:
            warnings.append(
                "⚠️ ALERT_REARM_THRESHOLD must be below ALERT_ESCALATION_THRESHOLD "
                "- hysteresis band is empty"
            )

        if self.simulation.history_capacity < 1:
            warnings.append("⚠️ HISTORY_CAPACITY must be at least 1")

        if not self.alerts.twilio_configured:
            warnings.append("ℹ️ Twilio not configured - SMS alerts disabled")

        if not self.gemini.configured:
            warnings.append(
                "ℹ️ GOOGLE_API_KEY not set - AI analysis uses fallback recommendations"
            )

        return warnings

    def to_dict(self) -> Dict:
        """Export settings as dictionary (for debugging, excludes secrets)."""
        return {
            "version": self.app.version,
            "debug": self.app.debug,
            "tick_interval_seconds": self.simulation.tick_interval_seconds,
            "history_capacity": self.simulation.history_capacity,
            "escalation_threshold": self.alerts.escalation_threshold,
            "rearm_threshold": self.alerts.rearm_threshold,
            "alert_list_cap": self.alerts.alert_list_cap,
            "twilio_configured": self.alerts.twilio_configured,
            "gemini_configured": self.gemini.configured,
            "gemini_model": self.gemini.model,
        }


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get global settings instance."""
    return settings


# Export commonly used settings
SIMULATION = settings.simulation
ALERTS = settings.alerts
GEMINI = settings.gemini
APP = settings.app
