from __future__ import annotations

from ..extensions import db
from orderdesk.time_utils import to_utc_z
from .soft_delete import SoftDeleteMixin


DEFAULT_ORDER_STATUS = "pending"


class Order(SoftDeleteMixin, db.Model):
    """
    Purchase record owned by a user.

    Status is an open set (pending, paid, cancelled, ...) stored as-is.
    Line items are owned through `items` and only change via item sync.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default=DEFAULT_ORDER_STATUS)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", backref=db.backref("orders", lazy=True))
    items = db.relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="select",
    )
    discounts = db.relationship(
        "Discount",
        back_populates="order",
        order_by="Discount.id",
        lazy="select",
    )

    @property
    def active_discounts(self) -> list:
        return [d for d in self.discounts if not d.is_deleted]

    def to_dict(self, *, include_items: bool = True, include_discounts: bool = False, include_user: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "deleted_at": to_utc_z(self.deleted_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        if include_discounts:
            data["discounts"] = [d.to_dict(include_coupon=True) for d in self.active_discounts]
        if include_user:
            data["user"] = self.user.to_dict() if self.user else None
        return data


class OrderItem(db.Model):
    """
    Line item of exactly one order.

    product_id is a reference into the catalog; price is the snapshot taken
    when the line was written (nullable when the product has no price).
    """
    __tablename__ = "order_items"
    __table_args__ = (
        db.UniqueConstraint("order_id", "product_id", name="uq_order_items_order_product"),
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.String(36), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    order = db.relationship("Order", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price": str(self.price) if self.price is not None else None,
        }
