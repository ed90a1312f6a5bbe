"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with HS256)
- Stores one session per refresh token so sessions can be blocked
- Renewal mints a new access token only; the refresh token is not rotated
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models.schemas.user import LoginSchema, RefreshTokenSchema, RegisterSchema, TokenOutSchema
from services.auth_service import ClientContext

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
token_out_schema = TokenOutSchema()


def _auth_service():
    return current_app.extensions["auth_service"]


def client_context() -> ClientContext:
    """User agent and client IP of the current request, taken verbatim."""
    route = request.access_route
    return ClientContext(
        user_agent=request.headers.get("User-Agent", ""),
        client_ip=route[0] if route else (request.remote_addr or ""),
    )


@bp.post("/register")
def register():
    """
    Register a new user and open a first session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password, fullname, phone]
          properties:
            email: { type: string }
            password: { type: string, minLength: 6 }
            fullname: { type: string }
            phone: { type: string }
    responses:
      201:
        description: Created (returns tokens)
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)

    result = _auth_service().register(
        email=data["email"],
        password=data["password"],
        fullname=data["fullname"],
        phone=data["phone"],
        client=client_context(),
    )
    return jsonify({"data": token_out_schema.dump(result)}), 201


@bp.post("/login")
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid email or password
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    result = _auth_service().login(data["email"], data["password"], client=client_context())
    return jsonify({"data": token_out_schema.dump(result)}), 200


@bp.post("/refresh")
def refresh():
    """
    Use a refresh token to obtain a new access token (no rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (new access token, same refresh token)
      401:
        description: Invalid, expired or blocked refresh token
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_token_schema.load(payload)

    result = _auth_service().renew_access_token(data["refresh_token"])
    return jsonify({"data": token_out_schema.dump(result)}), 200


@bp.post("/logout")
def logout():
    """
    Logout: blocks the session bound to the refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      204:
        description: ""
      401:
        description: Invalid refresh token
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_token_schema.load(payload)

    _auth_service().logout(data["refresh_token"])
    return ("", 204)
