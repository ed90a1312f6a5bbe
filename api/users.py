from __future__ import annotations

from flask import Blueprint, jsonify, current_app

from models.schemas.user import UserOutSchema
from utils.decorators import jwt_required

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()


@bp.get("/me")
@jwt_required()
def me(identity):
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: User no longer exists
    """
    user = current_app.extensions["auth_service"].profile(identity)
    return jsonify(
        {
            "data": user_out_schema.dump(user)
        }
    ), 200
