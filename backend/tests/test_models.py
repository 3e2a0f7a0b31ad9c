# Overview: Pytest coverage for soft-delete state and catalog associations.

from datetime import datetime

from orderdesk.extensions import db
from orderdesk.models import Active, Category, Coupon, Deleted, Image, Product, category_product, image_product


def test_deletion_state_is_tagged():
    coupon = Coupon(code="X")
    assert coupon.deletion == Active()
    assert coupon.is_deleted is False

    at = datetime(2026, 1, 2, 3, 4, 5)
    coupon.soft_delete(at=at)

    assert coupon.deletion == Deleted(at=at)
    assert coupon.is_deleted is True


def test_product_join_rows_follow_product(db_session):
    shoes = Category(name="Shoes")
    photo = Image(path="/img/1.png")
    product = Product(name="Runner", image=photo, categories=[shoes], gallery=[photo])
    db_session.add(product)
    db_session.commit()

    assert db_session.execute(db.select(db.func.count()).select_from(category_product)).scalar() == 1
    assert db_session.execute(db.select(db.func.count()).select_from(image_product)).scalar() == 1

    db_session.delete(product)
    db_session.commit()

    assert db_session.execute(db.select(db.func.count()).select_from(category_product)).scalar() == 0
    assert db_session.execute(db.select(db.func.count()).select_from(image_product)).scalar() == 0
    assert db_session.query(Category).count() == 1
