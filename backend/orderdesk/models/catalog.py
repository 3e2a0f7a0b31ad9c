from __future__ import annotations

import uuid

from ..extensions import db
from orderdesk.time_utils import to_utc_z


def _uuid() -> str:
    return str(uuid.uuid4())


image_product = db.Table(
    "image_product",
    db.Column("id", db.Integer, primary_key=True),
    db.Column("image_id", db.String(36), db.ForeignKey("images.id", ondelete="CASCADE")),
    db.Column("product_id", db.String(36), db.ForeignKey("products.id", ondelete="CASCADE")),
)

category_product = db.Table(
    "category_product",
    db.Column("id", db.Integer, primary_key=True),
    db.Column("product_id", db.String(36), db.ForeignKey("products.id", ondelete="CASCADE")),
    db.Column("category_id", db.String(36), db.ForeignKey("categories.id", ondelete="CASCADE")),
)


class Image(db.Model):
    __tablename__ = "images"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    path = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {"id": self.id, "path": self.path}


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    name = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


class Product(db.Model):
    """
    Catalog reference data. Orders read `price` to snapshot line items but
    never write products.
    """
    __tablename__ = "products"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    name = db.Column(db.String(200), nullable=True)
    image_id = db.Column(db.String(36), db.ForeignKey("images.id", ondelete="CASCADE"), nullable=True)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    image = db.relationship("Image", foreign_keys=[image_id])
    gallery = db.relationship("Image", secondary=image_product, lazy="select")
    categories = db.relationship(
        "Category",
        secondary=category_product,
        backref=db.backref("products", lazy=True),
        lazy="select",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "image_id": self.image_id,
            "description": self.description,
            "price": str(self.price) if self.price is not None else None,
            "categories": [c.to_dict() for c in self.categories],
            "gallery": [i.to_dict() for i in self.gallery],
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
