from flask import Blueprint, g, jsonify, request

from salonbook.auth import require_auth
from salonbook.errors import ValidationError
from salonbook.schemas import (
    AcceptingAppointmentsUpdate,
    ServiceCreate,
    ServiceOut,
    ServiceUpdate,
    parse_body,
)
from salonbook.services.app_settings import get_settings_provider
from salonbook.services.salon_service import (
    create_service,
    deactivate_service,
    get_managed_salon,
    get_nearby_salons,
    get_salon,
    get_salon_services,
    list_managed_services,
    set_accepting_appointments,
    update_service,
)
from salonbook.services.status_lifecycle import ROLE_ADMIN, ROLE_SALON_OWNER

salons_bp = Blueprint("salons", __name__, url_prefix="/api/salons")

DEFAULT_RADIUS_KM = 10.0


@salons_bp.route("/nearby", methods=["GET"])
def nearby_salons():
    """
    Get active salons near the user
    ---
    tags:
      - Salons
    parameters:
      - in: query
        name: user_lat
        type: number
        format: float
        required: true
      - in: query
        name: user_long
        type: number
        format: float
        required: true
      - in: query
        name: radius_km
        type: number
        format: float
        description: Search radius, default 10 km
    responses:
      200:
        description: Salons within the radius, nearest first, with distance text
      400:
        description: Missing or invalid coordinates
    """
    user_lat = request.args.get("user_lat", type=float)
    user_long = request.args.get("user_long", type=float)
    radius_km = request.args.get("radius_km", default=DEFAULT_RADIUS_KM, type=float)

    if user_lat is None or user_long is None:
        raise ValidationError("user_lat and user_long are required numbers")
    if not (-90 <= user_lat <= 90 and -180 <= user_long <= 180):
        raise ValidationError("user_lat/user_long are out of range")
    if radius_km <= 0:
        raise ValidationError("radius_km must be greater than 0")

    salons = get_nearby_salons(user_lat, user_long, radius_km)

    return jsonify(
        {
            "radius_km": radius_km,
            "results_found": len(salons),
            "salons": [s.model_dump(mode="json") for s in salons],
        }
    )


@salons_bp.route("/details/<salon_id>/services", methods=["GET"])
def salon_services(salon_id):
    """
    GET /api/salons/details/<salon_id>/services
    Purpose: Active services a salon offers, for the booking form.
    """
    services = get_salon_services(salon_id)

    return jsonify(
        {
            "salon_id": salon_id,
            "services_found": len(services),
            "services": [
                ServiceOut.model_validate(s).model_dump(mode="json") for s in services
            ],
        }
    )


@salons_bp.route("/details/<salon_id>/directions", methods=["GET"])
def salon_directions(salon_id):
    """
    GET /api/salons/details/<salon_id>/directions
    Purpose: A directions link for the map provider configured by the admin.
    """
    salon = get_salon(salon_id)
    if salon.latitude is None or salon.longitude is None:
        raise ValidationError("Salon has no location on file")

    provider = get_settings_provider()
    return jsonify(
        {
            "salon_id": salon_id,
            "map_provider": provider.get().map_provider,
            "url": provider.directions_url(
                float(salon.latitude), float(salon.longitude), salon.name
            ),
        }
    )


def _managed_salon(salon_id):
    return get_managed_salon(
        salon_id, g.current_user["user_id"], g.current_user["role"]
    )


def _service_json(service):
    return ServiceOut.model_validate(service).model_dump(mode="json")


@salons_bp.route("/manage/<salon_id>/services", methods=["GET"])
@require_auth(ROLE_SALON_OWNER, ROLE_ADMIN)
def managed_services(salon_id):
    """
    GET /api/salons/manage/<salon_id>/services
    Purpose: All of the owner's services, inactive ones included.
    """
    services = list_managed_services(_managed_salon(salon_id))
    return jsonify(
        {
            "salon_id": salon_id,
            "services_found": len(services),
            "services": [_service_json(s) for s in services],
        }
    )


@salons_bp.route("/manage/<salon_id>/services", methods=["POST"])
@require_auth(ROLE_SALON_OWNER, ROLE_ADMIN)
def add_service(salon_id):
    """
    Add a service to a salon
    ---
    tags:
      - Salons
    parameters:
      - in: path
        name: salon_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, price, duration_minutes]
          properties:
            name:
              type: string
            description:
              type: string
            price:
              type: number
              format: float
            duration_minutes:
              type: integer
            is_active:
              type: boolean
    responses:
      201:
        description: Service created
      400:
        description: Missing name, or price/duration not greater than 0
      404:
        description: Salon not found or not owned by the caller
    """
    salon = _managed_salon(salon_id)
    body = parse_body(ServiceCreate, request.get_json(silent=True))

    service = create_service(salon, body.model_dump())
    return (
        jsonify(
            {
                "status": "success",
                "message": f"{service.name} has been added",
                "service": _service_json(service),
            }
        ),
        201,
    )


@salons_bp.route("/manage/<salon_id>/services/<service_id>", methods=["PUT"])
@require_auth(ROLE_SALON_OWNER, ROLE_ADMIN)
def edit_service(salon_id, service_id):
    """
    PUT /api/salons/manage/<salon_id>/services/<service_id>
    Purpose: Change a service's name, description, price, duration or
    active flag. Only fields present in the body change.
    """
    salon = _managed_salon(salon_id)
    body = parse_body(ServiceUpdate, request.get_json(silent=True))

    service = update_service(salon, service_id, body.model_dump(exclude_unset=True))
    return jsonify(
        {
            "status": "success",
            "message": f"{service.name} has been updated",
            "service": _service_json(service),
        }
    )


@salons_bp.route("/manage/<salon_id>/services/<service_id>", methods=["DELETE"])
@require_auth(ROLE_SALON_OWNER, ROLE_ADMIN)
def remove_service(salon_id, service_id):
    """
    DELETE /api/salons/manage/<salon_id>/services/<service_id>
    Purpose: Take a service off the booking menu. It is deactivated, not
    deleted, so existing appointments still show it.
    """
    service = deactivate_service(_managed_salon(salon_id), service_id)
    return jsonify(
        {
            "status": "success",
            "message": f"{service.name} is no longer offered",
            "service": _service_json(service),
        }
    )


@salons_bp.route("/manage/<salon_id>/accepting", methods=["PUT"])
@require_auth(ROLE_SALON_OWNER, ROLE_ADMIN)
def update_accepting(salon_id):
    """
    PUT /api/salons/manage/<salon_id>/accepting
    Purpose: Open or close the salon for new bookings.
    Input: JSON body {"is_accepting_appointments": true|false}
    """
    salon = _managed_salon(salon_id)
    body = parse_body(AcceptingAppointmentsUpdate, request.get_json(silent=True))

    salon = set_accepting_appointments(salon, body.is_accepting_appointments)
    return jsonify(
        {
            "status": "success",
            "salon_id": salon.id,
            "is_accepting_appointments": salon.is_accepting_appointments,
        }
    )
