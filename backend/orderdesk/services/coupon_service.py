from __future__ import annotations

import logging

from sqlalchemy import func

from ..extensions import db
from ..models import Coupon
from ..validation import ConflictError, ModelValidationPolicy, NotFoundError, ValidationError, validate_payload

logger = logging.getLogger(__name__)

COUPON_POLICY = ModelValidationPolicy(
    writable_fields={"code", "description", "recursive", "valid_from", "valid_until", "is_active"},
    required_on_create={"code"},
)


def _require_coupon(coupon_id: int) -> Coupon:
    coupon = db.session.query(Coupon).filter(Coupon.id == coupon_id, Coupon.live()).first()
    if not coupon:
        raise NotFoundError(f"Coupon {coupon_id} not found")
    return coupon


def _check_rules(coupon: Coupon) -> None:
    if coupon.valid_from and coupon.valid_until and coupon.valid_from > coupon.valid_until:
        raise ValidationError("valid_from must be before valid_until")


def _ensure_code_free(code: str, exclude_id: int | None = None) -> None:
    # Codes stay reserved after a coupon is soft-deleted
    q = db.session.query(Coupon).filter(func.upper(Coupon.code) == code)
    if exclude_id is not None:
        q = q.filter(Coupon.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(f"Coupon code {code} already exists")


def list_coupons(active_only: bool = False) -> list[dict]:
    q = db.session.query(Coupon).filter(Coupon.live())
    if active_only:
        q = q.filter_by(is_active=True)
    return [c.to_dict() for c in q.order_by(Coupon.code.asc()).all()]


def get_coupon(coupon_id: int) -> dict:
    return _require_coupon(coupon_id).to_dict()


def create_coupon(data: dict) -> dict:
    patch = validate_payload(model=Coupon, payload=data, policy=COUPON_POLICY, partial=False)
    patch["code"] = patch["code"].upper()
    _ensure_code_free(patch["code"])

    coupon = Coupon(**patch)
    _check_rules(coupon)
    db.session.add(coupon)
    db.session.commit()
    logger.info("Created coupon %s (recursive=%s)", coupon.code, coupon.recursive)
    return coupon.to_dict()


def update_coupon(coupon_id: int, data: dict) -> dict:
    patch = validate_payload(model=Coupon, payload=data, policy=COUPON_POLICY, partial=True)
    coupon = _require_coupon(coupon_id)
    if "code" in patch:
        patch["code"] = patch["code"].upper()
        _ensure_code_free(patch["code"], exclude_id=coupon.id)

    for key, value in patch.items():
        setattr(coupon, key, value)
    try:
        _check_rules(coupon)
    except ValidationError:
        db.session.rollback()
        raise
    db.session.commit()
    return coupon.to_dict()


def delete_coupon(coupon_id: int) -> dict:
    coupon = _require_coupon(coupon_id)
    coupon.soft_delete()
    db.session.commit()
    logger.info("Soft-deleted coupon %s", coupon.code)
    return coupon.to_dict()
