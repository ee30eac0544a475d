"""
Tests for SMS alert delivery
"""

from unittest.mock import MagicMock, patch

from alert_service import (
    MAX_SMS_LENGTH,
    NotificationDispatcher,
    TwilioAlertService,
    TwilioConfig,
    format_sms,
)
from fleet_models import Alert, AlertKind, AlertSeverity


def _alert(severity=AlertSeverity.HIGH):
    return Alert(
        machine_id="MCH-003",
        machine_name="Gen Turbine T4",
        kind=AlertKind.FAILURE_PREDICTED,
        severity=severity,
        message="CRITICAL ALERT: bearing failure imminent",
    )


def _configured():
    return TwilioConfig(account_sid="AC123", auth_token="token", from_number="+15550001111")


class TestTwilioAlertService:
    def test_unconfigured_does_not_send(self):
        service = TwilioAlertService(TwilioConfig(account_sid="", auth_token="", from_number=""))
        assert service.send_sms("+15550002222", "hello") is False

    def test_send_sms(self):
        service = TwilioAlertService(_configured())
        client = MagicMock()
        client.messages.create.return_value.sid = "SM1"
        with patch("twilio.rest.Client", return_value=client):
            assert service.send_sms("+15550002222", "hello") is True

        client.messages.create.assert_called_once_with(
            body="hello", from_="+15550001111", to="+15550002222"
        )

    def test_long_message_truncated(self):
        service = TwilioAlertService(_configured())
        client = MagicMock()
        with patch("twilio.rest.Client", return_value=client):
            service.send_sms("+15550002222", "x" * 2000)

        body = client.messages.create.call_args.kwargs["body"]
        assert len(body) == MAX_SMS_LENGTH
        assert body.endswith("...")

    def test_provider_error_returns_false(self):
        service = TwilioAlertService(_configured())
        client = MagicMock()
        client.messages.create.side_effect = RuntimeError("21211 invalid number")
        with patch("twilio.rest.Client", return_value=client):
            assert service.send_sms("bad", "hello") is False


def test_format_sms():
    text = format_sms(_alert())
    assert text.startswith("🚨 FLEET MONITOR")
    assert "Gen Turbine T4 (MCH-003)" in text
    assert text.endswith("CRITICAL ALERT: bearing failure imminent")


class TestNotificationDispatcher:
    def test_no_endpoint_is_noop(self):
        sms = MagicMock()
        dispatcher = NotificationDispatcher(sms_service=sms, endpoint="")
        try:
            assert dispatcher.notify(_alert()) is None
        finally:
            dispatcher.shutdown(wait=True)
        sms.send_sms.assert_not_called()

    def test_only_high_severity_dispatched(self):
        sms = MagicMock()
        dispatcher = NotificationDispatcher(sms_service=sms, endpoint="+15550002222")
        try:
            assert dispatcher.notify(_alert(AlertSeverity.MEDIUM)) is None
        finally:
            dispatcher.shutdown(wait=True)
        sms.send_sms.assert_not_called()

    def test_high_alert_sent_to_registered_endpoint(self):
        sms = MagicMock()
        sms.send_sms.return_value = True
        dispatcher = NotificationDispatcher(sms_service=sms, endpoint="")
        dispatcher.register_endpoint(" +15550002222 ")
        try:
            future = dispatcher.notify(_alert())
            assert future.result(timeout=5) is True
        finally:
            dispatcher.shutdown(wait=True)

        to_number, body = sms.send_sms.call_args[0]
        assert to_number == "+15550002222"
        assert "FLEET MONITOR" in body

    def test_send_failure_is_swallowed(self):
        sms = MagicMock()
        sms.send_sms.side_effect = RuntimeError("network down")
        dispatcher = NotificationDispatcher(sms_service=sms, endpoint="+15550002222")
        try:
            assert dispatcher.notify(_alert()).result(timeout=5) is False
        finally:
            dispatcher.shutdown(wait=True)

    def test_clear_endpoint(self):
        dispatcher = NotificationDispatcher(sms_service=MagicMock(), endpoint="+1555")
        dispatcher.clear_endpoint()
        assert dispatcher.endpoint is None
        dispatcher.shutdown()
