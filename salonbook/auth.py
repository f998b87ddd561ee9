# Bearer token checks for API routes
from functools import wraps

import jwt
from flask import current_app, g, request

from salonbook.errors import AuthError, ForbiddenError
from salonbook.models import USER_ROLES


def decode_token(token):
    try:
        payload = jwt.decode(
            token, current_app.config["SECRET_KEY"], algorithms=["HS256"]
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    user_id = payload.get("user_id")
    role = str(payload.get("role", "")).lower()
    if not user_id or role not in USER_ROLES:
        raise AuthError("Invalid token")
    return {"user_id": str(user_id), "role": role}


def require_auth(*roles):
    """
    Decorator for routes that need a logged-in caller.

    Puts {"user_id", "role"} on g.current_user. When roles are given the
    caller's role must be one of them.
    """

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            header = request.headers.get("Authorization", "")
            if not header.startswith("Bearer "):
                raise AuthError("Missing bearer token")

            g.current_user = decode_token(header[len("Bearer "):].strip())

            if roles and g.current_user["role"] not in roles:
                raise ForbiddenError("Your role cannot perform this action")
            return view(*args, **kwargs)

        return wrapped

    return decorator
