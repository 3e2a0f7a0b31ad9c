# Overview: Flask API routes for orders and their discounts; parses input and returns JSON responses.

# backend/orderdesk/routes/orders.py
"""
Order administration routes.

Each handler builds an OrderWorkflow over the request's db.session and maps
domain errors to HTTP status codes. A rejected coupon is a 200 response
with info.success = false.
"""
from flask import Blueprint, request, jsonify, current_app

from ..extensions import db
from ..services.ledger_store import LedgerStore
from ..services.order_workflow import OrderWorkflow
from ..validation import ValidationError, NotFoundError, ConflictError

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _workflow() -> OrderWorkflow:
    config = current_app.config
    return OrderWorkflow(
        LedgerStore(db.session),
        retry_attempts=config["DB_RETRY_ATTEMPTS"],
        default_per_page=config["DEFAULT_PER_PAGE"],
        max_per_page=config["MAX_PER_PAGE"],
    )


def _order_body(order) -> dict:
    return order.to_dict(include_items=True, include_discounts=True, include_user=True)


@orders_bp.get("")
def list_orders():
    """
    List orders with optional filters and pagination.

    Query params:
    - status: str (optional) - exact status match
    - id: str (optional) - case-insensitive LIKE on the order id (accepts % wildcards)
    - page: int (optional, default 1)
    - per_page: int (optional, default 20, max 100)
    - include_deleted: "true" to include soft-deleted orders
    """
    result = _workflow().list_orders(
        status=request.args.get("status") or None,
        id_pattern=request.args.get("id") or None,
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
        include_deleted=request.args.get("include_deleted", "false").lower() == "true",
    )
    result["items"] = [o.to_dict(include_items=True, include_user=True) for o in result["items"]]
    return jsonify(result)


@orders_bp.post("")
def create_order():
    try:
        order = _workflow().create_order(request.get_json(silent=True))
        return jsonify(_order_body(order)), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("/<int:order_id>")
def get_order(order_id: int):
    try:
        order = _workflow().get_order(order_id)
        return jsonify(_order_body(order))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@orders_bp.route("/<int:order_id>", methods=["PUT", "PATCH"])
def update_order(order_id: int):
    try:
        order = _workflow().update_order(order_id, request.get_json(silent=True))
        return jsonify(_order_body(order))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.delete("/<int:order_id>")
def delete_order(order_id: int):
    try:
        order = _workflow().destroy_order(order_id)
        return jsonify(order.to_dict(include_items=False))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<int:order_id>/discounts")
def apply_discount(order_id: int):
    """Body: {"code": "SAVE10"}. Returns {"order", "info": {"message", "success"}}."""
    data = request.get_json(silent=True) or {}
    try:
        outcome = _workflow().apply_discount(order_id, data.get("code"))
        return jsonify({"order": _order_body(outcome.order), "info": outcome.info})
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to apply discount")
        return jsonify({"error": "Error coupon could not be applied"}), 500


@orders_bp.delete("/discounts/<int:discount_id>")
def remove_discount(discount_id: int):
    try:
        discount = _workflow().remove_discount(discount_id)
        return jsonify(discount.to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to remove discount")
        return jsonify({"error": "Internal server error"}), 500
