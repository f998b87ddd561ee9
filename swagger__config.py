"""
Swagger/OpenAPI configuration for the Salon Booking API
"""

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs",
}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Salon Booking API",
        "description": "Appointment booking, appointment status lifecycle, payments and salon discovery",
        "contact": {"email": "support@salonapp.com"},
        "version": "1.0.0",
    },
    "host": "",
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}"',
        }
    },
    "security": [{"Bearer": []}],
    "tags": [
        {"name": "Salons", "description": "Nearby salons, services, directions and owner upkeep"},
        {"name": "Appointments", "description": "Appointment booking and status changes"},
        {"name": "Payments", "description": "Offline and online appointment payments"},
        {"name": "Admin", "description": "Platform settings and salon verification"},
        {"name": "Utility", "description": "Health check"},
    ],
    "definitions": {
        "Error": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "error"},
                "message": {"type": "string"},
                "details": {"type": "object"},
            },
        },
        "Success": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "success"},
                "message": {"type": "string"},
            },
        },
        "Service": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "salon_id": {"type": "string"},
                "name": {"type": "string"},
                "description": {"type": "string"},
                "price": {"type": "number", "format": "float"},
                "duration_minutes": {"type": "integer"},
                "is_active": {"type": "boolean"},
            },
        },
        "Salon": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "name": {"type": "string"},
                "address": {"type": "string"},
                "city": {"type": "string"},
                "state": {"type": "string"},
                "phone_number": {"type": "string"},
                "latitude": {"type": "number", "format": "float"},
                "longitude": {"type": "number", "format": "float"},
                "distance_km": {"type": "number", "format": "float"},
                "distance_text": {"type": "string", "example": "850 m"},
            },
        },
        "Appointment": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "salon_id": {"type": "string"},
                "user_id": {"type": "string"},
                "appointment_date": {"type": "string", "format": "date"},
                "appointment_time": {"type": "string", "example": "11:30:00"},
                "appointment_number": {"type": "integer"},
                "readable_id": {"type": "string", "example": "ABC-240305-007"},
                "status": {
                    "type": "string",
                    "enum": ["pending", "confirmed", "completed", "cancelled", "no_show"],
                },
                "notes": {"type": "string"},
                "services": {"type": "array", "items": {"$ref": "#/definitions/Service"}},
                "salon": {"$ref": "#/definitions/Salon"},
            },
        },
        "Payment": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "appointment_id": {"type": "string"},
                "amount": {"type": "number", "format": "float"},
                "payment_method": {"type": "string", "enum": ["online", "offline"]},
                "status": {
                    "type": "string",
                    "enum": ["pending", "completed", "failed", "refunded"],
                },
                "transaction_id": {"type": "string"},
                "payment_date": {"type": "string", "format": "date-time"},
            },
        },
    },
}
