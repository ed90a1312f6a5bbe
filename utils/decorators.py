from __future__ import annotations
from functools import wraps
from flask import request, abort, current_app


def jwt_required():
    """
    Require a bearer access token.

    The token is checked by signature and expiry only; no store is consulted.
    The verified AuthIdentity is passed to the view as the `identity` keyword.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                abort(401, description="Missing or invalid Authorization header")
            token = auth.split(" ", 1)[1].strip()
            if not token:
                abort(401, description="Missing or invalid Authorization header")

            # InvalidToken / InvalidSignature / TokenExpired reach the error envelope
            identity = current_app.extensions["auth_service"].authenticate(token)
            return fn(*args, identity=identity, **kwargs)

        return wrapper

    return decorator
