import uuid
from typing import List

from sqlalchemy import (
    Boolean,
    DECIMAL,
    Date,
    DateTime,
    Enum,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

Base = declarative_base()
metadata = Base.metadata

APPOINTMENT_STATUSES = ("pending", "confirmed", "completed", "cancelled", "no_show")
PAYMENT_METHODS = ("online", "offline")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")
USER_ROLES = ("user", "salon_owner", "admin")
MAP_PROVIDERS = ("google", "openstreetmap")


def new_uuid() -> str:
    return str(uuid.uuid4())


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (Index("email", "email", unique=True),)

    id = mapped_column(String(36), primary_key=True, default=new_uuid)
    role = mapped_column(
        Enum(*USER_ROLES, name="user_role"),
        nullable=False,
        server_default=text("'user'"),
    )
    email = mapped_column(String(255))
    first_name = mapped_column(String(100))
    last_name = mapped_column(String(100))
    phone_number = mapped_column(String(25))
    is_phone_verified = mapped_column(
        Boolean, nullable=False, server_default=text("0")
    )
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    salons: Mapped[List["Salon"]] = relationship(
        "Salon", uselist=True, back_populates="owner"
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", uselist=True, back_populates="user"
    )


class Salon(Base):
    __tablename__ = "salons"
    __table_args__ = (
        ForeignKeyConstraint(
            ["owner_id"], ["profiles.id"], ondelete="RESTRICT", name="fk_salon_owner"
        ),
        Index("fk_salon_owner", "owner_id"),
        Index("idx_city", "city"),
        Index("idx_coords", "latitude", "longitude"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_uuid)
    owner_id = mapped_column(String(36), nullable=False)
    name = mapped_column(String(120), nullable=False)
    address = mapped_column(String(255), nullable=False)
    city = mapped_column(String(100), nullable=False)
    state = mapped_column(String(100))
    postal_code = mapped_column(String(20))
    latitude = mapped_column(DECIMAL(9, 6))
    longitude = mapped_column(DECIMAL(9, 6))
    phone_number = mapped_column(String(25))
    email = mapped_column(String(255))
    description = mapped_column(Text)
    opening_time = mapped_column(Time)
    closing_time = mapped_column(Time)
    is_active = mapped_column(Boolean, nullable=False, server_default=text("1"))
    is_verified = mapped_column(Boolean, nullable=False, server_default=text("0"))
    is_accepting_appointments = mapped_column(
        Boolean, nullable=False, server_default=text("1")
    )
    max_daily_appointments = mapped_column(Integer)
    # Last appointment_number handed out for this salon
    appointment_counter = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    owner: Mapped["Profile"] = relationship("Profile", back_populates="salons")
    services: Mapped[List["Service"]] = relationship(
        "Service", uselist=True, back_populates="salon"
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", uselist=True, back_populates="salon"
    )


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (
        ForeignKeyConstraint(
            ["salon_id"], ["salons.id"], ondelete="RESTRICT", name="fk_serv_salon"
        ),
        Index("fk_serv_salon", "salon_id"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_uuid)
    salon_id = mapped_column(String(36), nullable=False)
    name = mapped_column(String(100), nullable=False)
    description = mapped_column(Text)
    price = mapped_column(DECIMAL(10, 2), nullable=False)
    duration_minutes = mapped_column(Integer, nullable=False)
    is_active = mapped_column(Boolean, nullable=False, server_default=text("1"))
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    salon: Mapped["Salon"] = relationship("Salon", back_populates="services")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        ForeignKeyConstraint(["salon_id"], ["salons.id"], name="fk_ap_salon"),
        ForeignKeyConstraint(["user_id"], ["profiles.id"], name="fk_ap_user"),
        UniqueConstraint(
            "salon_id", "appointment_number", name="uq_ap_salon_number"
        ),
        Index("idx_ap_salon_slot", "salon_id", "appointment_date", "appointment_time"),
        Index("idx_ap_user_date", "user_id", "appointment_date"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_uuid)
    salon_id = mapped_column(String(36), nullable=False)
    user_id = mapped_column(String(36), nullable=False)
    appointment_date = mapped_column(Date, nullable=False)
    appointment_time = mapped_column(Time, nullable=False)
    appointment_number = mapped_column(Integer, nullable=False)
    readable_id = mapped_column(String(32))
    status = mapped_column(
        Enum(*APPOINTMENT_STATUSES, name="appointment_status"),
        nullable=False,
        server_default=text("'pending'"),
    )
    notes = mapped_column(Text)
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    salon: Mapped["Salon"] = relationship("Salon", back_populates="appointments")
    user: Mapped["Profile"] = relationship("Profile", back_populates="appointments")
    appointment_services: Mapped[List["AppointmentService"]] = relationship(
        "AppointmentService",
        uselist=True,
        back_populates="appointment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment", uselist=True, back_populates="appointment"
    )

    @property
    def services(self) -> List["Service"]:
        return [link.service for link in self.appointment_services]


class AppointmentService(Base):
    __tablename__ = "appointment_services"
    __table_args__ = (
        ForeignKeyConstraint(
            ["appointment_id"],
            ["appointments.id"],
            ondelete="CASCADE",
            name="fk_as_appointment",
        ),
        ForeignKeyConstraint(
            ["service_id"], ["services.id"], ondelete="RESTRICT", name="fk_as_service"
        ),
        Index("fk_as_appointment", "appointment_id"),
        Index("fk_as_service", "service_id"),
    )

    id = mapped_column(String(36), primary_key=True, default=new_uuid)
    appointment_id = mapped_column(String(36), nullable=False)
    service_id = mapped_column(String(36), nullable=False)

    appointment: Mapped["Appointment"] = relationship(
        "Appointment", back_populates="appointment_services"
    )
    service: Mapped["Service"] = relationship("Service")


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["appointment_id"], ["appointments.id"], name="fk_pay_appointment"
        ),
        Index("fk_pay_appointment", "appointment_id"),
        Index("idx_pay_transaction", "transaction_id", unique=True),
    )

    id = mapped_column(String(36), primary_key=True, default=new_uuid)
    appointment_id = mapped_column(String(36), nullable=False)
    amount = mapped_column(DECIMAL(10, 2), nullable=False)
    payment_method = mapped_column(
        Enum(*PAYMENT_METHODS, name="payment_method"), nullable=False
    )
    status = mapped_column(
        Enum(*PAYMENT_STATUSES, name="payment_status"),
        nullable=False,
        server_default=text("'pending'"),
    )
    transaction_id = mapped_column(String(255))
    payment_date = mapped_column(DateTime)
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    appointment: Mapped["Appointment"] = relationship(
        "Appointment", back_populates="payments"
    )


class AppSetting(Base):
    __tablename__ = "app_settings"
    __table_args__ = {"comment": "Single row of platform-wide configuration."}

    id = mapped_column(Integer, primary_key=True)
    map_provider = mapped_column(
        Enum(*MAP_PROVIDERS, name="map_provider"),
        nullable=False,
        server_default=text("'openstreetmap'"),
    )
    google_maps_api_key = mapped_column(String(255))
    sms_api_key = mapped_column(String(255))
    sms_sender_id = mapped_column(String(32))
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )
    updated_by = mapped_column(String(36))
