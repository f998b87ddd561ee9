# Booking workflow: create, then confirm by SMS; role-aware listings
from flask import current_app

from salonbook.errors import NotFoundError
from salonbook.extensions import db
from salonbook.models import Salon
from salonbook.services.appointment_repository import AppointmentRepository
from salonbook.services.notification_service import get_dispatcher
from salonbook.services.status_lifecycle import ROLE_ADMIN, ROLE_SALON_OWNER


def create_appointment(user_id, booking, repository=None):
    """
    booking is a validated AppointmentCreate. The SMS confirmation is sent
    after the booking is committed and its outcome does not affect the result.
    """
    repository = repository or AppointmentRepository()

    appointment = repository.create(
        salon_id=booking.salon_id,
        user_id=user_id,
        appointment_date=booking.appointment_date,
        appointment_time=booking.appointment_time,
        service_ids=booking.service_ids,
        notes=booking.notes,
        enforce_slot_exclusivity=current_app.config.get(
            "ENFORCE_SLOT_EXCLUSIVITY", True
        ),
    )
    current_app.logger.info(
        f"Appointment {appointment.readable_id} booked at salon {appointment.salon_id}"
    )

    result = get_dispatcher().appointment_booked(appointment)
    if not result.get("success"):
        current_app.logger.info(
            f"No booking SMS for {appointment.readable_id}: {result.get('message')}"
        )

    return appointment


def list_user_appointments(user_id, list_filter="all", repository=None):
    repository = repository or AppointmentRepository()
    return repository.list_for_user(user_id, list_filter)


def list_salon_appointments(
    salon_id, actor_id, actor_role, list_filter="all", repository=None
):
    salon = db.session.get(Salon, salon_id)
    if not salon:
        raise NotFoundError("Salon not found")
    if actor_role != ROLE_ADMIN and not (
        actor_role == ROLE_SALON_OWNER and salon.owner_id == actor_id
    ):
        raise NotFoundError("Salon not found")

    repository = repository or AppointmentRepository()
    return repository.list_for_salon(salon_id, list_filter)
