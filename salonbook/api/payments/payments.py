# Record appointment payments and payment verification
from flask import Blueprint, g, jsonify, request

from salonbook.auth import require_auth
from salonbook.schemas import (
    OfflinePaymentCreate,
    OnlinePaymentCreate,
    PaymentOut,
    PaymentVerify,
    parse_body,
)
from salonbook.services.appointment_repository import AppointmentRepository
from salonbook.services.payment_service import PaymentRecorder
from salonbook.services.status_lifecycle import (
    ROLE_ADMIN,
    ROLE_SALON_OWNER,
    ROLE_USER,
    AppointmentLifecycle,
)

payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


def _payment_response(payment, status_code):
    appointment = AppointmentRepository().get(payment.appointment_id)
    return (
        jsonify(
            {
                "status": "success",
                "payment": PaymentOut.model_validate(payment).model_dump(mode="json"),
                "appointment_status": appointment.status,
            }
        ),
        status_code,
    )


@payments_bp.route("/offline", methods=["POST"])
@require_auth(ROLE_SALON_OWNER, ROLE_ADMIN)
def record_offline_payment():
    """
    POST /api/payments/offline
    Purpose: The salon records a payment taken in person.
    Input: JSON body with appointment_id and amount (> 0).

    Behavior:
    - Payment is stored as completed.
    - A pending appointment becomes confirmed. Cancelled, completed and
      no-show appointments keep their status.
    - Appointment not found or not in the caller's salon → 404.
    """
    body = parse_body(OfflinePaymentCreate, request.get_json(silent=True))

    appointment = AppointmentRepository().get(body.appointment_id)
    AppointmentLifecycle.ensure_visible(
        appointment, g.current_user["user_id"], g.current_user["role"]
    )

    payment = PaymentRecorder().record_offline_payment(body.appointment_id, body.amount)
    return _payment_response(payment, 201)


@payments_bp.route("/online", methods=["POST"])
@require_auth(ROLE_USER)
def record_online_payment():
    """
    POST /api/payments/online
    Purpose: Store the gateway transaction for the user's own appointment.
    Input: JSON body with appointment_id, amount and transaction_id.

    Behavior:
    - Payment is stored as pending; the appointment is unchanged until the
      transaction is verified.
    """
    body = parse_body(OnlinePaymentCreate, request.get_json(silent=True))

    appointment = AppointmentRepository().get(body.appointment_id)
    AppointmentLifecycle.ensure_visible(
        appointment, g.current_user["user_id"], g.current_user["role"]
    )

    payment = PaymentRecorder().record_online_payment(
        body.appointment_id, body.amount, body.transaction_id
    )
    return _payment_response(payment, 201)


@payments_bp.route("/verify", methods=["POST"])
@require_auth(ROLE_ADMIN)
def verify_payment():
    """
    POST /api/payments/verify
    Purpose: Apply the verified outcome of an online payment.
    Input: JSON body with transaction_id and status (completed, failed, refunded).

    Behavior:
    - completed: payment completed, pending appointment confirmed.
    - failed / refunded: only the payment row changes.
    - Unknown transaction → 404.
    """
    body = parse_body(PaymentVerify, request.get_json(silent=True))
    payment = PaymentRecorder().verify_payment_status(body.transaction_id, body.status)
    return _payment_response(payment, 200)
