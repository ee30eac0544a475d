"""
Alert Service - SMS notifications for the Machine Fleet Monitor

High-severity alerts are pushed to the registered contact number via
Twilio. Delivery is best-effort: dispatch runs on a background worker,
and a failed or unconfigured send is logged and dropped, never raised.

Author: Fleet Monitor Team
Version: 1.2.0

Setup:
1. Get Twilio credentials: https://www.twilio.com/console
2. Add to .env:
   TWILIO_ACCOUNT_SID=your_sid
   TWILIO_AUTH_TOKEN=your_token
   TWILIO_FROM_NUMBER=+1234567890
   ALERT_SMS_TO=+1234567890        # optional, can be registered via the API
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from fleet_models import Alert, AlertSeverity
from settings import ALERTS

logger = logging.getLogger(__name__)

MAX_SMS_LENGTH = 1600


@dataclass
class TwilioConfig:
    """Twilio configuration (defaults from settings)"""

    account_sid: str = field(default_factory=lambda: ALERTS.twilio_account_sid)
    auth_token: str = field(default_factory=lambda: ALERTS.twilio_auth_token)
    from_number: str = field(default_factory=lambda: ALERTS.twilio_from_number)

    def is_configured(self) -> bool:
        """Check if Twilio is properly configured"""
        return bool(self.account_sid and self.auth_token and self.from_number)


class TwilioAlertService:
    """Send alerts via Twilio SMS"""

    def __init__(self, config: TwilioConfig = None):
        self.config = config or TwilioConfig()
        self._client = None
        self._initialized = False

    def _initialize_client(self) -> bool:
        """Lazy initialization of Twilio client"""
        if self._initialized:
            return self._client is not None

        if not self.config.is_configured():
            logger.warning("⚠️ Twilio not configured. SMS alerts disabled.")
            logger.info(
                "   Set TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_FROM_NUMBER in .env"
            )
            self._initialized = True
            return False

        try:
            from twilio.rest import Client

            self._client = Client(self.config.account_sid, self.config.auth_token)
            logger.info("✅ Twilio client initialized successfully")
            self._initialized = True
            return True
        except Exception as e:
            logger.error(f"❌ Failed to initialize Twilio: {e}")
            self._initialized = True
            return False

    def send_sms(self, to_number: str, message: str) -> bool:
        """
        Send SMS to a specific number

        Args:
            to_number: Recipient phone number (E.164 format: +1234567890)
            message: Message content (max 1600 chars for concatenated SMS)

        Returns:
            True if sent successfully
        """
        if not self._initialize_client():
            return False

        try:
            if len(message) > MAX_SMS_LENGTH:
                message = message[: MAX_SMS_LENGTH - 3] + "..."

            result = self._client.messages.create(
                body=message, from_=self.config.from_number, to=to_number
            )
            logger.info(f"📱 SMS sent to {to_number}: {result.sid}")
            return True
        except Exception as e:
            logger.error(f"❌ Failed to send SMS to {to_number}: {e}")
            return False


def format_sms(alert: Alert) -> str:
    """Format alert for SMS"""
    severity_emoji = {
        AlertSeverity.LOW: "ℹ️",
        AlertSeverity.MEDIUM: "⚠️",
        AlertSeverity.HIGH: "🚨",
    }

    emoji = severity_emoji.get(alert.severity, "📢")
    timestamp = alert.created_at.strftime("%H:%M")

    msg = f"{emoji} FLEET MONITOR\n"
    msg += f"🏭 {alert.machine_name} ({alert.machine_id})\n"
    msg += f"⏰ {timestamp}\n"
    msg += f"\n{alert.message}"
    return msg


class NotificationDispatcher:
    """
    Fire-and-forget SMS dispatch to a single registered contact endpoint.

    The endpoint is runtime state (registered by an operator through the
    API); with no endpoint registered, dispatch is a no-op.
    """

    def __init__(
        self,
        sms_service: Optional[TwilioAlertService] = None,
        endpoint: Optional[str] = None,
    ):
        self.sms = sms_service or TwilioAlertService()
        self._endpoint = (
            endpoint if endpoint is not None else ALERTS.sms_to_number
        ) or None
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="sms-dispatch"
        )

    @property
    def endpoint(self) -> Optional[str]:
        with self._lock:
            return self._endpoint

    def register_endpoint(self, endpoint: str) -> None:
        with self._lock:
            self._endpoint = endpoint.strip() or None
        logger.info(f"📱 SMS endpoint registered: {endpoint}")

    def clear_endpoint(self) -> None:
        with self._lock:
            self._endpoint = None
        logger.info("📵 SMS endpoint cleared")

    def dispatch(self, message: str, endpoint: str) -> Future:
        """Queue an SMS; the returned future resolves to the send result"""
        return self._executor.submit(self._send_quietly, message, endpoint)

    def _send_quietly(self, message: str, endpoint: str) -> bool:
        try:
            return self.sms.send_sms(endpoint, message)
        except Exception as e:
            logger.warning(f"SMS dispatch to {endpoint} dropped: {e}")
            return False

    def notify(self, alert: Alert) -> Optional[Future]:
        """Dispatch a high-severity alert to the registered endpoint, if any"""
        if alert.severity != AlertSeverity.HIGH:
            return None
        endpoint = self.endpoint
        if not endpoint:
            logger.debug(f"No SMS endpoint registered, skipping alert {alert.id}")
            return None
        return self.dispatch(format_sms(alert), endpoint)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)
