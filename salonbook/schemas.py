"""Pydantic models for request bodies and for rows leaving the database."""

import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from salonbook.errors import ValidationError
from salonbook.utils.readable_id import format_readable_id

AppointmentStatus = Literal["pending", "confirmed", "completed", "cancelled", "no_show"]
ListFilter = Literal["upcoming", "past", "cancelled", "all"]


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class AppointmentCreate(BaseModel):
    salon_id: str
    appointment_date: datetime.date
    appointment_time: datetime.time
    service_ids: List[str] = Field(min_length=1)
    notes: Optional[str] = None

    @field_validator("service_ids")
    @classmethod
    def validate_service_ids(cls, v):
        if any(not service_id for service_id in v):
            raise ValueError("service_ids must not contain empty values")
        # keep first occurrence order, drop duplicates
        return list(dict.fromkeys(v))


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class OfflinePaymentCreate(BaseModel):
    appointment_id: str
    amount: float

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("amount must be greater than 0")
        return v


class OnlinePaymentCreate(OfflinePaymentCreate):
    transaction_id: str = Field(min_length=1)


class PaymentVerify(BaseModel):
    transaction_id: str = Field(min_length=1)
    status: Literal["completed", "failed", "refunded"]


class AppSettingsUpdate(BaseModel):
    map_provider: Optional[Literal["google", "openstreetmap"]] = None
    google_maps_api_key: Optional[str] = None
    sms_api_key: Optional[str] = None
    sms_sender_id: Optional[str] = Field(default=None, max_length=32)


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    price: float = Field(gt=0)
    duration_minutes: int = Field(gt=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class AcceptingAppointmentsUpdate(BaseModel):
    is_accepting_appointments: bool


def parse_body(schema, data):
    """Validate a JSON body, turning pydantic errors into a 400 ValidationError."""
    if data is None:
        raise ValidationError("Request body is required")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        details = [
            {"field": ".".join(str(part) for part in err["loc"]), "error": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError("Invalid request body", details=details)


# ---------------------------------------------------------------------------
# Rows read back from the store
# ---------------------------------------------------------------------------


class ServiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    salon_id: str
    name: str
    description: Optional[str] = None
    price: float
    duration_minutes: int
    is_active: bool


class SalonSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str
    city: str
    state: Optional[str] = None
    phone_number: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class NearbySalon(SalonSummary):
    distance_km: float
    distance_text: str


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None


class SalonAdminOut(SalonSummary):
    owner_id: str
    is_active: bool
    is_verified: bool
    is_accepting_appointments: bool
    created_at: Optional[datetime.datetime] = None
    owner: Optional[UserSummary] = None


class AppointmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    salon_id: str
    user_id: str
    appointment_date: datetime.date
    appointment_time: datetime.time
    appointment_number: int
    readable_id: str
    status: AppointmentStatus
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    services: List[ServiceOut] = []
    salon: Optional[SalonSummary] = None
    user: Optional[UserSummary] = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    appointment_id: str
    amount: float
    payment_method: Literal["online", "offline"]
    status: Literal["pending", "completed", "failed", "refunded"]
    transaction_id: Optional[str] = None
    payment_date: Optional[datetime.datetime] = None


class AppSettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    map_provider: Literal["google", "openstreetmap"]
    google_maps_api_key: Optional[str] = None
    sms_api_key: Optional[str] = None
    sms_sender_id: Optional[str] = None


def appointment_readable_id(appointment) -> str:
    """Stored readable id, or one rebuilt from the booking day for older rows."""
    if appointment.readable_id:
        return appointment.readable_id
    booked_on = (
        appointment.created_at.date()
        if appointment.created_at
        else datetime.date.today()
    )
    return format_readable_id(
        appointment.salon_id, appointment.appointment_number, booked_on
    )


def serialize_appointment(appointment, include_user=False) -> dict:
    record = AppointmentOut(
        id=appointment.id,
        salon_id=appointment.salon_id,
        user_id=appointment.user_id,
        appointment_date=appointment.appointment_date,
        appointment_time=appointment.appointment_time,
        appointment_number=appointment.appointment_number,
        readable_id=appointment_readable_id(appointment),
        status=appointment.status,
        notes=appointment.notes,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
        services=[ServiceOut.model_validate(s) for s in appointment.services],
        salon=(
            SalonSummary.model_validate(appointment.salon)
            if appointment.salon
            else None
        ),
        user=(
            UserSummary.model_validate(appointment.user)
            if include_user and appointment.user
            else None
        ),
    )
    data = record.model_dump(mode="json")
    if not include_user:
        data.pop("user", None)
    return data
