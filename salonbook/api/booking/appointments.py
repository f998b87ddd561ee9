# Book appointments, list them per user or salon, move them through their statuses
from flask import Blueprint, g, jsonify, request

from salonbook.auth import require_auth
from salonbook.schemas import (
    AppointmentCreate,
    StatusUpdate,
    parse_body,
    serialize_appointment,
)
from salonbook.services.appointment_repository import AppointmentRepository
from salonbook.services.booking_service import (
    create_appointment,
    list_salon_appointments,
    list_user_appointments,
)
from salonbook.services.status_lifecycle import (
    ROLE_USER,
    AppointmentLifecycle,
)

appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


@appointments_bp.route("", methods=["POST"])
@require_auth(ROLE_USER)
def add_appointment():
    """
    Book a new appointment
    ---
    summary: Create a pending appointment for the logged-in user
    description: Inserts the appointment and one link row per selected
        service in a single transaction. The salon assigns the appointment
        number. An SMS confirmation is attempted when the user has a phone
        number; its failure does not fail the booking.
    tags:
      - Appointments
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [salon_id, appointment_date, appointment_time, service_ids]
          properties:
            salon_id:
              type: string
            appointment_date:
              type: string
              example: "2025-11-20"
            appointment_time:
              type: string
              example: "11:30"
            service_ids:
              type: array
              items:
                type: string
            notes:
              type: string
    responses:
      201:
        description: Appointment created
      400:
        description: Missing or invalid fields, or salon not accepting bookings
      404:
        description: Salon or service not found
      409:
        description: The slot is already taken
    """
    booking = parse_body(AppointmentCreate, request.get_json(silent=True))
    appointment = create_appointment(g.current_user["user_id"], booking)

    return (
        jsonify(
            {
                "status": "success",
                "message": "Appointment created successfully",
                "appointment": serialize_appointment(appointment),
            }
        ),
        201,
    )


@appointments_bp.route("/user", methods=["GET"])
@require_auth()
def get_user_appointments():
    """
    GET /api/appointments/user?filter=upcoming|past|cancelled|all
    Purpose: The caller's own appointments with their services and salon.

    Behavior:
    - upcoming: pending/confirmed from today on, soonest first
    - past: before today, or completed/no-show; most recent day first
    - cancelled: cancelled only
    - all (default): everything, by date and time
    """
    list_filter = request.args.get("filter", "all")
    appointments = list_user_appointments(g.current_user["user_id"], list_filter)

    return jsonify(
        {
            "filter": list_filter,
            "appointments_found": len(appointments),
            "appointments": [serialize_appointment(a) for a in appointments],
        }
    )


@appointments_bp.route("/salon/<salon_id>", methods=["GET"])
@require_auth()
def get_salon_appointments(salon_id):
    """
    GET /api/appointments/salon/<salon_id>?filter=upcoming|past|cancelled|all
    Purpose: Appointments booked at a salon, including who booked them.
    Only the salon's owner (or an admin) can see them; anyone else gets 404.
    """
    list_filter = request.args.get("filter", "all")
    appointments = list_salon_appointments(
        salon_id,
        g.current_user["user_id"],
        g.current_user["role"],
        list_filter,
    )

    return jsonify(
        {
            "salon_id": salon_id,
            "filter": list_filter,
            "appointments_found": len(appointments),
            "appointments": [
                serialize_appointment(a, include_user=True) for a in appointments
            ],
        }
    )


@appointments_bp.route("/<appointment_id>", methods=["GET"])
@require_auth()
def get_appointment(appointment_id):
    """
    GET /api/appointments/<appointment_id>
    Purpose: One appointment with its services. Visible to the booking user,
    the salon owner and admins.
    """
    appointment = AppointmentRepository().get(appointment_id)
    AppointmentLifecycle.ensure_visible(
        appointment, g.current_user["user_id"], g.current_user["role"]
    )

    include_user = g.current_user["role"] != ROLE_USER
    return jsonify(serialize_appointment(appointment, include_user=include_user))


@appointments_bp.route("/<appointment_id>/status", methods=["PATCH"])
@require_auth()
def update_appointment_status(appointment_id):
    """
    Change an appointment's status
    ---
    summary: Apply one lifecycle transition
    description: The only way to change an appointment's status. Users may
        cancel their own pending or confirmed appointment before its day.
        Salon owners may confirm, complete, mark no-show or cancel.
        Completed, cancelled and no-show appointments are final.
    tags:
      - Appointments
    parameters:
      - in: path
        name: appointment_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [status]
          properties:
            status:
              type: string
              enum: [pending, confirmed, completed, cancelled, no_show]
    responses:
      200:
        description: Status updated
      400:
        description: Transition not allowed for this caller
      404:
        description: Appointment not found or not visible to the caller
    """
    body = parse_body(StatusUpdate, request.get_json(silent=True))

    appointment = AppointmentLifecycle().update_status(
        appointment_id,
        g.current_user["user_id"],
        g.current_user["role"],
        body.status,
    )

    return jsonify(
        {
            "status": "success",
            "message": f"Appointment status has been updated to {appointment.status}",
            "appointment": serialize_appointment(
                appointment, include_user=g.current_user["role"] != ROLE_USER
            ),
        }
    )
