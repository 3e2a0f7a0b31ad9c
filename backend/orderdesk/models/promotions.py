from __future__ import annotations

from ..extensions import db
from orderdesk.time_utils import to_utc_z
from .soft_delete import SoftDeleteMixin


class Coupon(SoftDeleteMixin, db.Model):
    """
    Promotional code.

    `code` is stored upper-case and looked up case-insensitively.
    `recursive` coupons may be applied on top of other active discounts.
    """
    __tablename__ = "coupons"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    recursive = db.Column(db.Boolean, nullable=False, default=False)

    valid_from = db.Column(db.DateTime(timezone=True), nullable=True)
    valid_until = db.Column(db.DateTime(timezone=True), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "description": self.description,
            "recursive": self.recursive,
            "valid_from": to_utc_z(self.valid_from),
            "valid_until": to_utc_z(self.valid_until),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "deleted_at": to_utc_z(self.deleted_at),
        }


class Discount(SoftDeleteMixin, db.Model):
    """
    One coupon applied to one order.

    While active, a given coupon appears on an order at most once.
    """
    __tablename__ = "discounts"
    __table_args__ = (
        db.Index(
            "uq_discounts_active_order_coupon",
            "order_id",
            "coupon_id",
            unique=True,
            sqlite_where=db.text("deleted_at IS NULL"),
            postgresql_where=db.text("deleted_at IS NULL"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    coupon_id = db.Column(db.Integer, db.ForeignKey("coupons.id"), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    order = db.relationship("Order", back_populates="discounts")
    coupon = db.relationship("Coupon", backref=db.backref("discounts", lazy=True))

    def to_dict(self, *, include_coupon: bool = False) -> dict:
        data = {
            "id": self.id,
            "order_id": self.order_id,
            "coupon_id": self.coupon_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "deleted_at": to_utc_z(self.deleted_at),
        }
        if include_coupon:
            data["coupon"] = self.coupon.to_dict() if self.coupon else None
        return data
