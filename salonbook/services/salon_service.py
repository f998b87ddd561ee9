# Salon lookups for the booking screens, and salon upkeep by owners and admins
from flask import current_app
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from salonbook.errors import NotFoundError, StoreError, ValidationError
from salonbook.extensions import db
from salonbook.models import Salon, Service
from salonbook.schemas import NearbySalon, SalonSummary
from salonbook.services.status_lifecycle import ROLE_ADMIN, ROLE_SALON_OWNER
from salonbook.utils.distance import format_distance, haversine_distance_km


def get_salon(salon_id):
    salon = db.session.get(Salon, salon_id)
    if not salon or not salon.is_active:
        raise NotFoundError("Salon not found")
    return salon


def get_salon_services(salon_id):
    get_salon(salon_id)
    stmt = (
        select(Service)
        .where(Service.salon_id == salon_id, Service.is_active.is_(True))
        .order_by(Service.name)
    )
    return db.session.scalars(stmt).all()


def get_nearby_salons(latitude, longitude, radius_km=10.0):
    """Active salons within radius_km, nearest first."""
    salons = db.session.scalars(select(Salon).where(Salon.is_active.is_(True))).all()

    nearby = []
    for salon in salons:
        if salon.latitude is None or salon.longitude is None:
            continue

        distance = haversine_distance_km(
            latitude, longitude, float(salon.latitude), float(salon.longitude)
        )
        if distance > radius_km:
            continue

        summary = SalonSummary.model_validate(salon).model_dump()
        nearby.append(
            NearbySalon(
                **summary,
                distance_km=round(distance, 3),
                distance_text=format_distance(distance),
            )
        )

    nearby.sort(key=lambda s: s.distance_km)
    return nearby


# ----------------------------------------------------------------------
# owner side
# ----------------------------------------------------------------------

# Columns a service update may not blank out
REQUIRED_SERVICE_FIELDS = ("name", "price", "duration_minutes", "is_active")

VERIFICATION_FILTERS = ("all", "verified", "unverified")
SALONS_PER_PAGE = 10


def _commit(action):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error trying to {action}: {e}")
        raise StoreError(f"Failed to {action}", details=str(e))


def get_managed_salon(salon_id, actor_id, actor_role):
    """The salon if the caller owns it (or is an admin); otherwise 404."""
    salon = db.session.get(Salon, salon_id)
    if not salon:
        raise NotFoundError("Salon not found")
    if actor_role == ROLE_ADMIN:
        return salon
    if actor_role == ROLE_SALON_OWNER and salon.owner_id == actor_id:
        return salon
    raise NotFoundError("Salon not found")


def _get_salon_service(salon, service_id):
    service = db.session.get(Service, service_id)
    if not service or service.salon_id != salon.id:
        raise NotFoundError("Service not found")
    return service


def list_managed_services(salon):
    """Every service of the salon, inactive ones included."""
    stmt = select(Service).where(Service.salon_id == salon.id).order_by(Service.name)
    return db.session.scalars(stmt).all()


def create_service(salon, data):
    service = Service(salon_id=salon.id, **data)
    db.session.add(service)
    _commit("create service")
    current_app.logger.info(f"Service '{service.name}' added to salon {salon.id}")
    return service


def update_service(salon, service_id, changes):
    service = _get_salon_service(salon, service_id)
    for field, value in changes.items():
        if value is None and field in REQUIRED_SERVICE_FIELDS:
            continue
        setattr(service, field, value)
    _commit("update service")
    return service


def deactivate_service(salon, service_id):
    """
    Hide a service from new bookings. The row stays so past appointments
    keep their service details.
    """
    service = _get_salon_service(salon, service_id)
    service.is_active = False
    _commit("deactivate service")
    current_app.logger.info(f"Service {service_id} deactivated at salon {salon.id}")
    return service


def set_accepting_appointments(salon, accepting):
    salon.is_accepting_appointments = accepting
    _commit("update salon availability")
    return salon


# ----------------------------------------------------------------------
# admin side
# ----------------------------------------------------------------------


def list_salons_for_review(verification="all", query=None, page=1):
    """Salons newest first, optionally filtered by verification and a search term."""
    if verification not in VERIFICATION_FILTERS:
        raise ValidationError(
            f"verification must be one of: {', '.join(VERIFICATION_FILTERS)}"
        )
    if page < 1:
        raise ValidationError("page must be 1 or greater")

    stmt = select(Salon)
    if verification != "all":
        stmt = stmt.where(Salon.is_verified.is_(verification == "verified"))
    if query:
        pattern = f"%{query}%"
        stmt = stmt.where(
            or_(
                Salon.name.ilike(pattern),
                Salon.address.ilike(pattern),
                Salon.city.ilike(pattern),
            )
        )

    total = db.session.scalar(select(func.count()).select_from(stmt.subquery()))
    salons = db.session.scalars(
        stmt.options(selectinload(Salon.owner))
        .order_by(Salon.created_at.desc(), Salon.name)
        .limit(SALONS_PER_PAGE)
        .offset((page - 1) * SALONS_PER_PAGE)
    ).all()
    return salons, total


def set_salon_verified(salon_id, verified, admin_id=None):
    salon = db.session.get(Salon, salon_id)
    if not salon:
        raise NotFoundError("Salon not found")
    salon.is_verified = verified
    _commit("update salon verification")
    current_app.logger.info(
        f"Salon {salon_id} {'verified' if verified else 'unverified'} by {admin_id}"
    )
    return salon
