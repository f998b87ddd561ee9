# Appointment notifications (SMS). Best-effort: never raises to the caller.
from typing import Dict

from flask import current_app

from salonbook.schemas import appointment_readable_id
from salonbook.services.app_settings import get_settings_provider
from salonbook.services.sms_service import SmsService


def format_when(appointment) -> str:
    """e.g. '05 Mar 2024 at 10:30'"""
    return (
        f"{appointment.appointment_date.strftime('%d %b %Y')} at "
        f"{appointment.appointment_time.strftime('%H:%M')}"
    )


class NotificationDispatcher:
    def __init__(self, sms: SmsService, sms_on_status_change: bool = False):
        self.sms = sms
        self.sms_on_status_change = sms_on_status_change

    def _gateway_overrides(self) -> Dict:
        """Sender id and auth token saved by an admin; None keeps the configured ones."""
        settings = get_settings_provider().get()
        return {"sender_id": settings.sms_sender_id, "auth_token": settings.sms_api_key}

    def appointment_booked(self, appointment) -> Dict:
        phone_number = appointment.user.phone_number if appointment.user else None
        if not phone_number:
            return {"success": False, "message": "User has no phone number"}

        try:
            return self.sms.send_appointment_confirmation(
                phone_number,
                appointment_readable_id(appointment),
                appointment.salon.name,
                format_when(appointment),
                **self._gateway_overrides(),
            )
        except Exception as e:
            current_app.logger.error(
                f"Booking confirmation for {appointment.id} not sent: {e}"
            )
            return {"success": False, "message": str(e)}

    def status_changed(self, appointment, old_status: str, new_status: str) -> Dict:
        current_app.logger.info(
            f"Appointment {appointment.id} status {old_status} -> {new_status}"
        )
        if not self.sms_on_status_change:
            return {"success": False, "message": "Status SMS disabled"}

        phone_number = appointment.user.phone_number if appointment.user else None
        if not phone_number:
            return {"success": False, "message": "User has no phone number"}

        try:
            return self.sms.send_status_update(
                phone_number,
                appointment_readable_id(appointment),
                appointment.salon.name,
                new_status,
                **self._gateway_overrides(),
            )
        except Exception as e:
            current_app.logger.error(
                f"Status update SMS for {appointment.id} not sent: {e}"
            )
            return {"success": False, "message": str(e)}


def get_dispatcher() -> NotificationDispatcher:
    return current_app.extensions["notifications"]
