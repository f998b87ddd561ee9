# Admin: salon review queue and verification
from flask import Blueprint, g, jsonify, request

from salonbook.auth import require_auth
from salonbook.errors import ValidationError
from salonbook.schemas import SalonAdminOut
from salonbook.services.salon_service import list_salons_for_review, set_salon_verified
from salonbook.services.status_lifecycle import ROLE_ADMIN

admin_salons_bp = Blueprint("admin_salons", __name__, url_prefix="/api/admin/salons")


def _salon_json(salon):
    return SalonAdminOut.model_validate(salon).model_dump(mode="json")


@admin_salons_bp.route("", methods=["GET"])
@require_auth(ROLE_ADMIN)
def list_salons():
    """
    List salons for review
    ---
    tags:
      - Admin
    parameters:
      - in: query
        name: verification
        type: string
        enum: [all, verified, unverified]
        default: all
      - in: query
        name: q
        type: string
        description: Matches name, address or city
      - in: query
        name: page
        type: integer
        default: 1
    responses:
      200:
        description: One page of salons, newest first, with their owners
      400:
        description: Unknown verification filter or bad page
      403:
        description: Caller is not an admin
    """
    verification = request.args.get("verification", "all")
    query = request.args.get("q", "").strip() or None
    try:
        page = int(request.args.get("page", 1))
    except ValueError:
        raise ValidationError("page must be an integer")

    salons, total = list_salons_for_review(verification, query=query, page=page)
    return jsonify(
        {
            "verification": verification,
            "page": page,
            "total": total,
            "salons": [_salon_json(s) for s in salons],
        }
    )


@admin_salons_bp.route("/<salon_id>/verify", methods=["PUT"])
@require_auth(ROLE_ADMIN)
def verify_salon(salon_id):
    """
    PUT /api/admin/salons/<salon_id>/verify
    Purpose: Mark a salon as verified after an admin has reviewed it.
    """
    salon = set_salon_verified(salon_id, True, admin_id=g.current_user["user_id"])
    return jsonify(
        {
            "status": "success",
            "message": f"{salon.name} has been verified",
            "salon": _salon_json(salon),
        }
    )


@admin_salons_bp.route("/<salon_id>/unverify", methods=["PUT"])
@require_auth(ROLE_ADMIN)
def unverify_salon(salon_id):
    """
    PUT /api/admin/salons/<salon_id>/unverify
    """
    salon = set_salon_verified(salon_id, False, admin_id=g.current_user["user_id"])
    return jsonify(
        {
            "status": "success",
            "message": f"{salon.name} is no longer verified",
            "salon": _salon_json(salon),
        }
    )
