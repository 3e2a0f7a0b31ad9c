# Overview: Flask API routes for coupon administration.

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..services import coupon_service
from ..validation import ValidationError, NotFoundError, ConflictError

coupons_bp = Blueprint("coupons", __name__, url_prefix="/api/coupons")


@coupons_bp.route("", methods=["GET"])
def list_coupons():
    active_only = request.args.get("active_only", "false").lower() == "true"
    return jsonify(coupon_service.list_coupons(active_only))


@coupons_bp.route("", methods=["POST"])
def create_coupon():
    data = request.get_json(silent=True) or {}
    try:
        result = coupon_service.create_coupon(data)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify(result), 201


@coupons_bp.route("/<int:coupon_id>", methods=["GET"])
def get_coupon(coupon_id: int):
    try:
        return jsonify(coupon_service.get_coupon(coupon_id))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@coupons_bp.route("/<int:coupon_id>", methods=["PATCH"])
def update_coupon(coupon_id: int):
    data = request.get_json(silent=True) or {}
    try:
        result = coupon_service.update_coupon(coupon_id, data)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify(result)


@coupons_bp.route("/<int:coupon_id>", methods=["DELETE"])
def delete_coupon(coupon_id: int):
    try:
        return jsonify(coupon_service.delete_coupon(coupon_id))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
