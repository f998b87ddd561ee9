"""
Appointment status lifecycle.

    pending ──► confirmed
       │            │
       └─────┬──────┘
             ▼
    completed | cancelled | no_show

completed, cancelled and no_show are final. Who may move an appointment
along an edge depends on the actor:

* user (the person who booked): pending/confirmed -> cancelled, and only
  while the appointment date is strictly after today. The comparison is on
  the date alone, so an appointment for today can no longer be cancelled
  by the user.
* salon_owner (or an admin acting for the salon): pending -> confirmed,
  and pending/confirmed -> completed, no_show or cancelled.

Every (current, requested, actor) combination either passes check_transition
or raises ValidationError. Nothing is a silent no-op, and asking for the
status the appointment already has is rejected.
"""
import datetime

from flask import current_app

from salonbook.errors import NotFoundError, ValidationError
from salonbook.models import APPOINTMENT_STATUSES
from salonbook.services.appointment_repository import AppointmentRepository
from salonbook.services.notification_service import get_dispatcher

PENDING = "pending"
CONFIRMED = "confirmed"
COMPLETED = "completed"
CANCELLED = "cancelled"
NO_SHOW = "no_show"

TERMINAL_STATUSES = frozenset({COMPLETED, CANCELLED, NO_SHOW})

ROLE_USER = "user"
ROLE_SALON_OWNER = "salon_owner"
ROLE_ADMIN = "admin"
ACTOR_ROLES = (ROLE_USER, ROLE_SALON_OWNER, ROLE_ADMIN)

_SALON_TRANSITIONS = {
    PENDING: frozenset({CONFIRMED, COMPLETED, NO_SHOW, CANCELLED}),
    CONFIRMED: frozenset({COMPLETED, NO_SHOW, CANCELLED}),
}

TRANSITIONS = {
    ROLE_USER: {
        PENDING: frozenset({CANCELLED}),
        CONFIRMED: frozenset({CANCELLED}),
    },
    ROLE_SALON_OWNER: _SALON_TRANSITIONS,
    ROLE_ADMIN: _SALON_TRANSITIONS,
}


def check_transition(current, requested, actor_role, appointment_date, today=None):
    """Raise ValidationError unless actor_role may move current -> requested."""
    if requested not in APPOINTMENT_STATUSES:
        raise ValidationError(f"Unknown appointment status '{requested}'")
    if actor_role not in ACTOR_ROLES:
        raise ValidationError(f"Unknown role '{actor_role}'")
    if current in TERMINAL_STATUSES:
        raise ValidationError(f"Appointment is already {current} and cannot change")
    if requested == current:
        raise ValidationError(f"Appointment is already {current}")

    allowed = TRANSITIONS[actor_role].get(current, frozenset())
    if requested not in allowed:
        raise ValidationError(
            f"A {actor_role.replace('_', ' ')} cannot change an appointment "
            f"from {current} to {requested}"
        )

    if actor_role == ROLE_USER and requested == CANCELLED:
        today = today or datetime.date.today()
        if not appointment_date > today:
            raise ValidationError(
                "Appointments can only be cancelled before the day of the appointment"
            )


def is_transition_allowed(current, requested, actor_role, appointment_date, today=None):
    try:
        check_transition(current, requested, actor_role, appointment_date, today)
    except ValidationError:
        return False
    return True


class AppointmentLifecycle:
    def __init__(self, repository=None, dispatcher=None):
        self.repository = repository or AppointmentRepository()
        self.dispatcher = dispatcher

    def _dispatcher(self):
        return self.dispatcher or get_dispatcher()

    @staticmethod
    def ensure_visible(appointment, actor_id, actor_role):
        """Callers only see their own bookings, or the bookings of salons they own."""
        if actor_role == ROLE_ADMIN:
            return
        if actor_role == ROLE_USER and appointment.user_id == actor_id:
            return
        if (
            actor_role == ROLE_SALON_OWNER
            and appointment.salon is not None
            and appointment.salon.owner_id == actor_id
        ):
            return
        raise NotFoundError("Appointment not found")

    def update_status(self, appointment_id, actor_id, actor_role, new_status):
        appointment = self.repository.get(appointment_id)
        self.ensure_visible(appointment, actor_id, actor_role)

        old_status = appointment.status
        check_transition(
            old_status, new_status, actor_role, appointment.appointment_date
        )

        self.repository.update_status(
            appointment_id, new_status, expected_status=old_status
        )
        appointment = self.repository.get(appointment_id)
        self._dispatcher().status_changed(appointment, old_status, new_status)
        return appointment

    def confirm_from_payment(self, appointment_id):
        """
        Confirm an appointment after its payment completed.

        Only pending appointments move. A confirmed one is left alone, and a
        cancelled, completed or no-show appointment is never brought back.
        Returns True when the status was written.
        """
        appointment = self.repository.get(appointment_id)
        old_status = appointment.status

        if old_status == CONFIRMED:
            return False
        if old_status != PENDING:
            current_app.logger.warning(
                f"Payment completed for {old_status} appointment {appointment_id}; "
                f"status left unchanged"
            )
            return False

        self.repository.update_status(
            appointment_id, CONFIRMED, expected_status=PENDING
        )
        appointment = self.repository.get(appointment_id)
        self._dispatcher().status_changed(appointment, old_status, CONFIRMED)
        return True
