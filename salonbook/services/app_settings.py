# Platform-wide settings: map provider and SMS sender
import time
from urllib.parse import quote

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from salonbook.extensions import db
from salonbook.models import AppSetting
from salonbook.schemas import AppSettingsOut

SETTINGS_ROW_ID = 1

DEFAULT_SETTINGS = AppSettingsOut(
    map_provider="openstreetmap",
    google_maps_api_key=None,
    sms_api_key=None,
    sms_sender_id=None,
)


class AppSettingsProvider:
    """
    Reads the single app_settings row and keeps it for ttl_seconds.

    The copy is dropped when it expires and whenever update() writes a new
    row, so an admin change is visible to this process immediately and to
    other workers within one TTL.
    """

    def __init__(self, ttl_seconds=300, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._cached = None
        self._loaded_at = None

    def invalidate(self):
        self._cached = None
        self._loaded_at = None

    def _is_fresh(self):
        return (
            self._cached is not None
            and self.clock() - self._loaded_at < self.ttl_seconds
        )

    def get(self) -> AppSettingsOut:
        if self._is_fresh():
            return self._cached

        try:
            row = db.session.scalar(
                select(AppSetting).where(AppSetting.id == SETTINGS_ROW_ID)
            )
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Using default settings, DB fetch failed: {e}")
            return DEFAULT_SETTINGS

        settings = AppSettingsOut.model_validate(row) if row else DEFAULT_SETTINGS
        self._cached = settings
        self._loaded_at = self.clock()
        return settings

    def update(self, changes: dict, updated_by=None) -> AppSettingsOut:
        row = db.session.get(AppSetting, SETTINGS_ROW_ID)
        if row is None:
            row = AppSetting(id=SETTINGS_ROW_ID, map_provider="openstreetmap")
            db.session.add(row)

        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_by = updated_by

        db.session.commit()
        self.invalidate()
        current_app.logger.info(
            f"Platform settings updated by {updated_by}: {sorted(changes)}"
        )
        return self.get()

    def directions_url(self, latitude, longitude, destination_name=None) -> str:
        provider = self.get().map_provider
        if provider == "google":
            return (
                "https://www.google.com/maps/dir/?api=1"
                f"&destination={latitude},{longitude}"
                f"&destination_place_id={quote(destination_name or '')}"
            )
        return f"https://www.openstreetmap.org/directions?from=&to={latitude},{longitude}"


def get_settings_provider() -> AppSettingsProvider:
    return current_app.extensions["app_settings"]
