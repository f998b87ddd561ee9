# Appointment persistence: booking, listing with services, status writes
import datetime

from flask import current_app
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from salonbook.errors import (
    BookingError,
    NotFoundError,
    SlotUnavailableError,
    StoreError,
    ValidationError,
)
from salonbook.extensions import db
from salonbook.models import (
    Appointment,
    AppointmentService,
    Profile,
    Salon,
    Service,
)
from salonbook.utils.readable_id import format_readable_id

ACTIVE_STATUSES = ("pending", "confirmed")
LIST_FILTERS = ("upcoming", "past", "cancelled", "all")


class AppointmentRepository:
    def __init__(self, session=None):
        self.session = session or db.session

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    def create(
        self,
        salon_id,
        user_id,
        appointment_date,
        appointment_time,
        service_ids,
        notes=None,
        enforce_slot_exclusivity=True,
    ):
        """
        Book one slot at a salon.

        The appointment row, its number and its service links are written in
        one transaction. Any failure rolls all of it back.
        """
        if not service_ids:
            raise ValidationError("At least one service must be selected")
        if not isinstance(appointment_date, datetime.date) or not isinstance(
            appointment_time, datetime.time
        ):
            raise ValidationError("appointment_date and appointment_time are required")

        today = datetime.date.today()
        if appointment_date < today:
            raise ValidationError("Cannot book an appointment in the past")

        user = self.session.get(Profile, user_id)
        if not user:
            raise NotFoundError("User not found")

        salon = self.session.get(Salon, salon_id)
        if not salon or not salon.is_active:
            raise NotFoundError("Salon not found")
        if not salon.is_accepting_appointments:
            raise ValidationError("Salon is not accepting appointments")

        services = self._load_services(salon_id, service_ids)

        try:
            appointment_number = self._next_appointment_number(salon_id)

            if enforce_slot_exclusivity and self._slot_taken(
                salon_id, appointment_date, appointment_time
            ):
                raise SlotUnavailableError()

            if salon.max_daily_appointments is not None:
                booked = self._count_active_on(salon_id, appointment_date)
                if booked >= salon.max_daily_appointments:
                    raise ValidationError("Salon is fully booked on this date")

            appointment = Appointment(
                salon_id=salon_id,
                user_id=user_id,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                appointment_number=appointment_number,
                readable_id=format_readable_id(salon_id, appointment_number, today),
                status="pending",
                notes=notes or None,
            )
            self.session.add(appointment)
            self.session.flush()

            for service in services:
                self.session.add(
                    AppointmentService(
                        appointment_id=appointment.id, service_id=service.id
                    )
                )
            self.session.commit()

        except BookingError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Error creating appointment: {e}")
            raise StoreError("Failed to create appointment", details=str(e))

        return self.get(appointment.id)

    def _load_services(self, salon_id, service_ids):
        services = self.session.scalars(
            select(Service).where(Service.id.in_(service_ids))
        ).all()
        by_id = {service.id: service for service in services}

        missing = [sid for sid in service_ids if sid not in by_id]
        if missing:
            raise NotFoundError("Service not found", details={"service_ids": missing})

        for service in services:
            if service.salon_id != salon_id:
                raise ValidationError(
                    f"Service {service.id} is not offered by this salon"
                )
            if not service.is_active:
                raise ValidationError(f"Service '{service.name}' is not available")

        return [by_id[sid] for sid in service_ids]

    def _next_appointment_number(self, salon_id):
        # Single-statement increment; takes the salon row lock until commit
        self.session.execute(
            update(Salon)
            .where(Salon.id == salon_id)
            .values(appointment_counter=Salon.appointment_counter + 1)
            .execution_options(synchronize_session=False)
        )
        return self.session.scalar(
            select(Salon.appointment_counter).where(Salon.id == salon_id)
        )

    def _slot_taken(self, salon_id, appointment_date, appointment_time):
        stmt = select(Appointment.id).where(
            and_(
                Appointment.salon_id == salon_id,
                Appointment.appointment_date == appointment_date,
                Appointment.appointment_time == appointment_time,
                Appointment.status.in_(ACTIVE_STATUSES),
            )
        )
        return self.session.scalar(stmt.limit(1)) is not None

    def _count_active_on(self, salon_id, appointment_date):
        return self.session.scalar(
            select(func.count(Appointment.id)).where(
                and_(
                    Appointment.salon_id == salon_id,
                    Appointment.appointment_date == appointment_date,
                    Appointment.status.in_(ACTIVE_STATUSES),
                )
            )
        )

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def _with_relations(self, stmt):
        return stmt.options(
            selectinload(Appointment.appointment_services).selectinload(
                AppointmentService.service
            ),
            selectinload(Appointment.salon),
            selectinload(Appointment.user),
        )

    def get(self, appointment_id):
        stmt = self._with_relations(
            select(Appointment).where(Appointment.id == appointment_id)
        )
        appointment = self.session.scalar(stmt)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def list_for_user(self, user_id, list_filter="all"):
        stmt = select(Appointment).where(Appointment.user_id == user_id)
        return self._list(stmt, list_filter)

    def list_for_salon(self, salon_id, list_filter="all"):
        stmt = select(Appointment).where(Appointment.salon_id == salon_id)
        return self._list(stmt, list_filter)

    def _list(self, stmt, list_filter):
        if list_filter not in LIST_FILTERS:
            raise ValidationError(
                f"filter must be one of: {', '.join(LIST_FILTERS)}"
            )

        today = datetime.date.today()

        if list_filter == "upcoming":
            stmt = stmt.where(
                Appointment.status.in_(ACTIVE_STATUSES),
                Appointment.appointment_date >= today,
            ).order_by(Appointment.appointment_date, Appointment.appointment_time)
        elif list_filter == "past":
            stmt = stmt.where(
                or_(
                    Appointment.appointment_date < today,
                    Appointment.status.in_(("completed", "no_show")),
                )
            ).order_by(
                Appointment.appointment_date.desc(), Appointment.appointment_time
            )
        elif list_filter == "cancelled":
            stmt = stmt.where(Appointment.status == "cancelled").order_by(
                Appointment.appointment_date, Appointment.appointment_time
            )
        else:
            stmt = stmt.order_by(
                Appointment.appointment_date, Appointment.appointment_time
            )

        return self.session.scalars(self._with_relations(stmt)).all()

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    def update_status(self, appointment_id, new_status, expected_status=None):
        """
        Write a status. No transition rules here; callers go through
        AppointmentLifecycle. With expected_status the write only happens if
        the row still holds that status.
        """
        stmt = update(Appointment).where(Appointment.id == appointment_id)
        if expected_status is not None:
            stmt = stmt.where(Appointment.status == expected_status)
        stmt = stmt.values(status=new_status, updated_at=func.now())

        try:
            result = self.session.execute(
                stmt.execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.session.rollback()
                if expected_status is not None and self.session.get(
                    Appointment, appointment_id
                ):
                    raise ValidationError(
                        "Appointment status changed by another request, reload and retry"
                    )
                raise NotFoundError("Appointment not found")
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Error updating appointment status: {e}")
            raise StoreError("Failed to update appointment status", details=str(e))
