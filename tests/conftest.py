"""
Pytest configuration and shared fixtures for the salon booking tests.
"""

import datetime
import os

import jwt
import pytest

os.environ["TESTING"] = "True"

from main import create_app  # noqa: E402
from salonbook.config import Config  # noqa: E402
from salonbook.extensions import db as database  # noqa: E402
from salonbook.models import (  # noqa: E402
    Appointment,
    AppointmentService,
    Base,
    Profile,
    Salon,
    Service,
)
from salonbook.services.notification_service import NotificationDispatcher  # noqa: E402


class RecordingSms:
    """Stands in for SmsService and remembers every message it was asked to send."""

    def __init__(self, fail=False):
        self.fail = fail
        self.confirmations = []
        self.status_updates = []

    def send_appointment_confirmation(
        self,
        phone_number,
        readable_id,
        salon_name,
        when_text,
        sender_id=None,
        auth_token=None,
    ):
        if self.fail:
            raise RuntimeError("gateway down")
        self.confirmations.append(
            {
                "phone_number": phone_number,
                "readable_id": readable_id,
                "salon_name": salon_name,
                "when_text": when_text,
                "sender_id": sender_id,
                "auth_token": auth_token,
            }
        )
        return {"success": True, "message": "SMS sent successfully"}

    def send_status_update(
        self,
        phone_number,
        readable_id,
        salon_name,
        status,
        sender_id=None,
        auth_token=None,
    ):
        if self.fail:
            raise RuntimeError("gateway down")
        self.status_updates.append(
            {
                "phone_number": phone_number,
                "readable_id": readable_id,
                "status": status,
                "sender_id": sender_id,
                "auth_token": auth_token,
            }
        )
        return {"success": True, "message": "SMS sent successfully"}


@pytest.fixture(scope="session")
def app():
    """Create and configure a test app instance."""
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "SECRET_KEY": "test-secret-key-for-testing-only",
        }
    )

    actual_db_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    assert actual_db_uri.startswith("sqlite"), "tests must not touch a real database"
    assert Config().is_safe_for_testing, "configured database looks like production"

    yield app


@pytest.fixture
def db(app):
    """Fresh tables for every test."""
    with app.app_context():
        Base.metadata.create_all(bind=database.engine)
        app.extensions["app_settings"].invalidate()

        yield database

        database.session.remove()
        Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def client(app, db):
    return app.test_client()


@pytest.fixture
def sms(app):
    """Swap in a recording SMS client; status-change SMS switched on."""
    original = app.extensions["notifications"]
    recorder = RecordingSms()
    app.extensions["notifications"] = NotificationDispatcher(
        recorder, sms_on_status_change=True
    )
    yield recorder
    app.extensions["notifications"] = original


@pytest.fixture
def failing_sms(app):
    original = app.extensions["notifications"]
    app.extensions["notifications"] = NotificationDispatcher(
        RecordingSms(fail=True), sms_on_status_change=True
    )
    yield
    app.extensions["notifications"] = original


@pytest.fixture
def today():
    return datetime.date.today()


@pytest.fixture
def tomorrow(today):
    return today + datetime.timedelta(days=1)


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def _make(role="user", phone_number="9876543210", **kwargs):
        counter["n"] += 1
        profile = Profile(
            role=role,
            email=kwargs.pop("email", f"{role}{counter['n']}@example.com"),
            first_name=kwargs.pop("first_name", "Test"),
            last_name=kwargs.pop("last_name", role.title()),
            phone_number=phone_number,
            **kwargs,
        )
        db.session.add(profile)
        db.session.commit()
        return profile

    return _make


@pytest.fixture
def make_salon(db):
    def _make(owner, **kwargs):
        values = {
            "name": "Test Salon",
            "address": "123 Test St",
            "city": "Newark",
            "latitude": 40.735660,
            "longitude": -74.172370,
            "phone_number": "123-456-7890",
            "is_active": True,
            "is_verified": True,
            "is_accepting_appointments": True,
        }
        values.update(kwargs)
        salon = Salon(owner_id=owner.id, **values)
        db.session.add(salon)
        db.session.commit()
        return salon

    return _make


@pytest.fixture
def make_service(db):
    def _make(salon, name="Haircut", price=50.00, duration_minutes=60, **kwargs):
        service = Service(
            salon_id=salon.id,
            name=name,
            price=price,
            duration_minutes=duration_minutes,
            **kwargs,
        )
        db.session.add(service)
        db.session.commit()
        return service

    return _make


@pytest.fixture
def make_appointment(db):
    """Insert an appointment row directly, e.g. one dated in the past."""
    numbers = {}

    def _make(salon, user, appointment_date, appointment_time=None, status="pending", services=()):
        numbers[salon.id] = numbers.get(salon.id, 100) + 1
        appointment = Appointment(
            salon_id=salon.id,
            user_id=user.id,
            appointment_date=appointment_date,
            appointment_time=appointment_time or datetime.time(10, 0),
            appointment_number=numbers[salon.id],
            status=status,
        )
        db.session.add(appointment)
        db.session.flush()
        for service in services:
            db.session.add(
                AppointmentService(appointment_id=appointment.id, service_id=service.id)
            )
        db.session.commit()
        return appointment

    return _make


@pytest.fixture
def customer(make_profile):
    return make_profile(role="user", first_name="Casey", phone_number="9876543210")


@pytest.fixture
def owner(make_profile):
    return make_profile(role="salon_owner", first_name="Sam", phone_number="5551234567")


@pytest.fixture
def admin(make_profile):
    return make_profile(role="admin", first_name="Alex")


@pytest.fixture
def salon(make_salon, owner):
    return make_salon(owner)


@pytest.fixture
def haircut(make_service, salon):
    return make_service(salon, name="Haircut", price=50.00, duration_minutes=60)


@pytest.fixture
def beard_trim(make_service, salon):
    return make_service(salon, name="Beard Trim", price=20.00, duration_minutes=20)


@pytest.fixture
def auth_headers(app):
    """Build Authorization headers for a profile."""

    def _headers(profile):
        payload = {
            "user_id": profile.id,
            "email": profile.email,
            "role": profile.role,
            "exp": datetime.datetime.now(datetime.timezone.utc)
            + datetime.timedelta(hours=1),
        }
        token = jwt.encode(payload, app.config["SECRET_KEY"], algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def book(client, auth_headers, tomorrow):
    """POST a booking and return the response."""

    def _book(user, salon, services, appointment_date=None, appointment_time="11:30", **extra):
        body = {
            "salon_id": salon.id,
            "appointment_date": (appointment_date or tomorrow).isoformat(),
            "appointment_time": appointment_time,
            "service_ids": [s.id for s in services],
        }
        body.update(extra)
        return client.post("/api/appointments", json=body, headers=auth_headers(user))

    return _book
