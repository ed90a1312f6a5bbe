from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, abort, current_app

from models.cart import Cart
from models.schemas.cart import CartCreateSchema, CartUpdateQtySchema, CartOutSchema
from utils.decorators import jwt_required

bp = Blueprint("carts", __name__)

# Schemas
cart_create_schema = CartCreateSchema()
cart_update_qty_schema = CartUpdateQtySchema()
cart_out_schema = CartOutSchema()
carts_out_schema = CartOutSchema(many=True)

MAX_LIMIT = 100


def _storage():
    return current_app.extensions["storage"]


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def _own_cart_or_404(cart_id: str, user_id: str) -> Cart:
    cart = _storage().get(Cart, cart_id)
    # another user's cart is reported exactly like a missing one
    if not cart or cart.user_id != user_id:
        abort(404, description="Cart not found")
    return cart


@bp.post("/carts")
@jwt_required()
def add_cart(identity):
    """
    Add an item to the current user's cart
    ---
    tags:
      - Carts
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            product_id: { type: string }
            qty: { type: integer, minimum: 1, default: 1 }
            note: { type: string, maxLength: 255 }
    responses:
      201:
        description: Created
      401:
        description: Unauthorized
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = cart_create_schema.load(payload)

    storage = _storage()
    cart = Cart(
        user_id=identity.user_id,
        product_id=data["product_id"],
        qty=data["qty"],
        note=data.get("note"),
    )
    storage.new(cart)
    storage.save()
    return jsonify({"data": cart_out_schema.dump(cart)}), 201


@bp.get("/carts")
@jwt_required()
def list_carts(identity):
    """
    List the current user's cart items
    ---
    tags:
      - Carts
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200:
        description: List of cart items
    """
    session = _storage().get_session()
    page, limit = parse_pagination()

    query = session.query(Cart).filter(Cart.user_id == identity.user_id)
    total = query.count()
    rows = (
        query.order_by(Cart.created_at.asc(), Cart.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        {
            "data": carts_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.patch("/carts/<cart_id>")
@jwt_required()
def update_qty(cart_id: str, identity):
    """
    Change the quantity of a cart item
    ---
    tags:
      - Carts
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: cart_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            qty: { type: integer, minimum: 1 }
    responses:
      200:
        description: Updated
      404:
        description: Not found
      422:
        description: Validation error
    """
    cart = _own_cart_or_404(cart_id, identity.user_id)
    payload = request.get_json(silent=True) or {}
    data = cart_update_qty_schema.load(payload)

    storage = _storage()
    cart.qty = data["qty"]
    storage.new(cart)
    storage.save()
    return jsonify({"data": cart_out_schema.dump(cart)}), 200


@bp.delete("/carts/<cart_id>")
@jwt_required()
def delete_cart(cart_id: str, identity):
    """
    Remove an item from the cart
    ---
    tags:
      - Carts
    security:
      - Bearer: []
    parameters:
      - in: path
        name: cart_id
        type: string
        required: true
    responses:
      200:
        description: Deleted
      404:
        description: Not found
    """
    cart = _own_cart_or_404(cart_id, identity.user_id)

    storage = _storage()
    storage.delete(cart)
    storage.save()
    return jsonify({"message": "success"}), 200
