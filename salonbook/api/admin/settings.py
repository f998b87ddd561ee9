# Admin: platform-wide settings (map provider, SMS sender)
from flask import Blueprint, g, jsonify, request

from salonbook.auth import require_auth
from salonbook.schemas import AppSettingsUpdate, parse_body
from salonbook.services.app_settings import get_settings_provider
from salonbook.services.status_lifecycle import ROLE_ADMIN

admin_settings_bp = Blueprint("admin_settings", __name__, url_prefix="/api/settings")


@admin_settings_bp.route("", methods=["GET"])
@require_auth(ROLE_ADMIN)
def get_settings():
    """
    GET /api/settings
    Purpose: Current platform settings, or the defaults if none were saved.
    """
    settings = get_settings_provider().get()
    return jsonify(settings.model_dump(mode="json"))


@admin_settings_bp.route("", methods=["PUT"])
@require_auth(ROLE_ADMIN)
def update_settings():
    """
    Update platform settings
    ---
    tags:
      - Admin
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            map_provider:
              type: string
              enum: [google, openstreetmap]
            google_maps_api_key:
              type: string
            sms_api_key:
              type: string
            sms_sender_id:
              type: string
    responses:
      200:
        description: Settings saved; the cached copy is refreshed right away
      400:
        description: Invalid values
      403:
        description: Caller is not an admin
    """
    body = parse_body(AppSettingsUpdate, request.get_json(silent=True))
    changes = body.model_dump(exclude_unset=True)
    # map_provider is required on the row; null means "leave as is"
    if changes.get("map_provider", "") is None:
        changes.pop("map_provider")

    settings = get_settings_provider().update(
        changes, updated_by=g.current_user["user_id"]
    )
    return jsonify(
        {
            "status": "success",
            "message": "Settings updated",
            "settings": settings.model_dump(mode="json"),
        }
    )
