import base64
import datetime
from types import SimpleNamespace
from urllib.parse import parse_qs

import httpx
import pytest

from salonbook.services.notification_service import NotificationDispatcher, format_when
from salonbook.services.sms_service import SmsService


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield


def make_service(handler, **kwargs):
    return SmsService(
        account_sid="AC123",
        auth_token="token",
        from_number="+15550001111",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.sms
class TestSmsService:
    """Test the Twilio SMS client against a mocked transport."""

    def test_send_sms_success(self, app_context):
        sent = []

        def handler(request):
            sent.append(request)
            return httpx.Response(201, json={"sid": "SM123"})

        result = make_service(handler).send_sms("98765 43210", "Hello")

        assert result == {"success": True, "message": "SMS sent successfully"}
        assert sent[0].url.path == "/2010-04-01/Accounts/AC123/Messages.json"
        form = parse_qs(sent[0].content.decode())
        assert form["To"] == ["+919876543210"]
        assert form["From"] == ["+15550001111"]
        assert form["Body"] == ["Hello"]
        assert sent[0].headers["Authorization"].startswith("Basic ")

    def test_sender_id_overrides_from_number(self, app_context):
        sent = []

        def handler(request):
            sent.append(parse_qs(request.content.decode()))
            return httpx.Response(201, json={"sid": "SM124"})

        make_service(handler).send_sms("+15557654321", "Hi", sender_id="GLAMUP")

        assert sent[0]["From"] == ["GLAMUP"]
        assert sent[0]["To"] == ["+15557654321"]

    def test_auth_token_override(self, app_context):
        """Test a stored SMS API key replaces the configured auth token."""
        headers = []

        def handler(request):
            headers.append(request.headers["Authorization"])
            return httpx.Response(201, json={"sid": "SM125"})

        service = make_service(handler)
        service.send_sms("9876543210", "Hi")
        service.send_sms("9876543210", "Hi", auth_token="stored-key")

        assert headers[0] == "Basic " + base64.b64encode(b"AC123:token").decode()
        assert headers[1] == "Basic " + base64.b64encode(b"AC123:stored-key").decode()

    def test_gateway_error(self, app_context):
        def handler(request):
            return httpx.Response(400, json={"message": "invalid number"})

        result = make_service(handler).send_sms("123", "Hello")

        assert result["success"] is False
        assert result["message"] == "SMS gateway returned 400"

    def test_network_error_does_not_raise(self, app_context):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = make_service(handler).send_sms("9876543210", "Hello")

        assert result["success"] is False

    def test_missing_credentials_disable_sending(self, app_context):
        service = SmsService(account_sid=None, auth_token=None, from_number=None)

        result = service.send_sms("9876543210", "Hello")

        assert service.disabled is True
        assert result == {"success": False, "message": "SMS sending is disabled"}

    def test_no_phone_number(self, app_context):
        result = make_service(lambda request: httpx.Response(201)).send_sms("", "Hi")

        assert result["success"] is False

    def test_testing_config_disables_sending(self, app):
        service = SmsService.from_config(app.config)

        assert service.disabled is True

    def test_format_phone(self):
        service = SmsService("AC1", "t", "+1555", default_country_code="+44")

        assert service.format_phone("7700 900123") == "+447700900123"
        assert service.format_phone("+1 (555) 123-4567") == "+15551234567"

    def test_confirmation_text(self, app_context):
        bodies = []

        def handler(request):
            bodies.append(parse_qs(request.content.decode())["Body"][0])
            return httpx.Response(201, json={"sid": "SM1"})

        make_service(handler).send_appointment_confirmation(
            "9876543210", "ABC-240305-007", "Test Salon", "05 Mar 2024 at 10:30"
        )

        assert "ABC-240305-007" in bodies[0]
        assert "Test Salon" in bodies[0]
        assert "05 Mar 2024 at 10:30" in bodies[0]


class BrokenSms:
    def send_appointment_confirmation(self, *args, **kwargs):
        raise RuntimeError("boom")

    def send_status_update(self, *args, **kwargs):
        raise RuntimeError("boom")


@pytest.mark.sms
class TestNotificationDispatcher:
    """Test the dispatcher never lets an SMS problem escape."""

    @pytest.fixture
    def appointment(self):
        return SimpleNamespace(
            id="appt-1",
            salon_id="abc123",
            appointment_number=7,
            readable_id="ABC-240305-007",
            appointment_date=datetime.date(2024, 3, 5),
            appointment_time=datetime.time(10, 30),
            user=SimpleNamespace(phone_number="9876543210"),
            salon=SimpleNamespace(name="Test Salon"),
        )

    def test_format_when(self, appointment):
        assert format_when(appointment) == "05 Mar 2024 at 10:30"

    def test_booked_swallows_errors(self, db, appointment):
        result = NotificationDispatcher(BrokenSms()).appointment_booked(appointment)

        assert result == {"success": False, "message": "boom"}

    def test_status_changed_swallows_errors(self, db, appointment):
        dispatcher = NotificationDispatcher(BrokenSms(), sms_on_status_change=True)

        result = dispatcher.status_changed(appointment, "pending", "confirmed")

        assert result["success"] is False

    def test_status_sms_disabled(self, db, appointment):
        result = NotificationDispatcher(BrokenSms()).status_changed(
            appointment, "pending", "confirmed"
        )

        assert result == {"success": False, "message": "Status SMS disabled"}

    def test_booked_without_phone(self, db, appointment):
        appointment.user = SimpleNamespace(phone_number=None)

        result = NotificationDispatcher(BrokenSms()).appointment_booked(appointment)

        assert result == {"success": False, "message": "User has no phone number"}
