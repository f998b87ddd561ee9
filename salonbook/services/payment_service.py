# Payment rows for appointments and the confirmation they trigger
import datetime

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from salonbook.errors import NotFoundError, StoreError, ValidationError
from salonbook.extensions import db
from salonbook.models import Payment
from salonbook.services.appointment_repository import AppointmentRepository
from salonbook.services.status_lifecycle import AppointmentLifecycle


class PaymentRecorder:
    def __init__(self, repository=None, lifecycle=None):
        self.repository = repository or AppointmentRepository()
        self.lifecycle = lifecycle or AppointmentLifecycle(self.repository)

    def _insert(self, appointment_id, amount, method, status, transaction_id=None):
        # raises NotFoundError before anything is written
        self.repository.get(appointment_id)

        payment = Payment(
            appointment_id=appointment_id,
            amount=amount,
            payment_method=method,
            status=status,
            transaction_id=transaction_id,
            payment_date=datetime.datetime.now(),
        )
        try:
            db.session.add(payment)
            db.session.commit()
        except IntegrityError as e:
            # unique idx_pay_transaction; lost a race with the same transaction id
            db.session.rollback()
            current_app.logger.warning(f"Duplicate payment for {transaction_id}: {e}")
            raise ValidationError("Transaction already recorded")
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error recording payment: {e}")
            raise StoreError("Failed to record payment", details=str(e))
        return payment

    def record_offline_payment(self, appointment_id, amount):
        """Cash at the salon: recorded as completed and confirms the appointment."""
        payment = self._insert(appointment_id, amount, "offline", "completed")
        self.lifecycle.confirm_from_payment(appointment_id)
        return payment

    def record_online_payment(self, appointment_id, amount, transaction_id):
        """Gateway payment: stays pending until verify_payment_status."""
        existing = db.session.scalar(
            select(Payment.id).where(Payment.transaction_id == transaction_id)
        )
        if existing:
            raise ValidationError("Transaction already recorded")
        return self._insert(
            appointment_id, amount, "online", "pending", transaction_id=transaction_id
        )

    def verify_payment_status(self, transaction_id, status):
        payment = db.session.scalar(
            select(Payment).where(Payment.transaction_id == transaction_id)
        )
        if not payment:
            raise NotFoundError("Payment not found")

        try:
            payment.status = status
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error updating payment status: {e}")
            raise StoreError("Failed to update payment status", details=str(e))

        if status == "completed":
            self.lifecycle.confirm_from_payment(payment.appointment_id)
        return payment
