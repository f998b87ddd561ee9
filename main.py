import os

from flask import Flask
from flask_cors import CORS
from flasgger import Swagger

from salonbook.api.admin.salons import admin_salons_bp
from salonbook.api.admin.settings import admin_settings_bp
from salonbook.api.booking.appointments import appointments_bp
from salonbook.api.payments.payments import payments_bp
from salonbook.api.salons.salons import salons_bp
from salonbook.config import Config
from salonbook.errors import register_error_handlers
from salonbook.extensions import db
from salonbook.services.app_settings import AppSettingsProvider
from salonbook.services.notification_service import NotificationDispatcher
from salonbook.services.sms_service import SmsService
from swagger__config import SWAGGER_CONFIG, SWAGGER_TEMPLATE

BLUEPRINTS = (
    salons_bp,
    appointments_bp,
    payments_bp,
    admin_settings_bp,
    admin_salons_bp,
)


def init_collaborators(app):
    """Settings cache and SMS dispatcher, one per app; tests replace them in app.extensions."""
    app.extensions["app_settings"] = AppSettingsProvider(
        ttl_seconds=app.config["APP_SETTINGS_TTL_SECONDS"]
    )
    app.extensions["notifications"] = NotificationDispatcher(
        SmsService.from_config(app.config),
        sms_on_status_change=app.config["SMS_ON_STATUS_CHANGE"],
    )
    sms = app.extensions["notifications"].sms
    print(f"SMS sending {'disabled' if sms.disabled else 'enabled'}")


def create_app(config_overrides=None):
    print("create_app(): building salon booking API")
    app = Flask(__name__)
    try:
        app.config.from_object(Config)
        if config_overrides:
            app.config.update(config_overrides)

        CORS(app)
        db.init_app(app)
        print("Database bound")

        init_collaborators(app)
        register_error_handlers(app)

        swagger_template = dict(SWAGGER_TEMPLATE)
        swagger_template["host"] = os.environ.get("API_HOST", "127.0.0.1:5000")
        Swagger(app, config=SWAGGER_CONFIG, template=swagger_template)
        print(f"API docs at {SWAGGER_CONFIG['specs_route']}")

        for bp in BLUEPRINTS:
            app.register_blueprint(bp)
            print(f"  + {bp.name} ({bp.url_prefix})")

        @app.route("/")
        def home():
            """
            Health check
            ---
            tags:
              - Utility
            responses:
              200:
                description: The API is up
            """
            return {"status": "ok", "message": "Backend is running!"}, 200

    except Exception as e:
        print(f"create_app() failed: {e}")
        raise

    print(f"create_app(): {len(list(app.url_map.iter_rules()))} routes ready")
    return app


if __name__ == "__main__":
    # .env needs MYSQL_PUBLIC_URL=mysql+pymysql://<USER>:<PASSWORD>@<HOST>:<PORT>/salonbook
    application = create_app()
    application.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        debug=os.environ.get("FLASK_ENV") != "production",
    )
