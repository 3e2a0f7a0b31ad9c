# Overview: Repository over the order/coupon/discount tables; owns transaction scope.

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import String, cast, func, or_

from ..models import Coupon, Discount, Order, Product, User
from ..validation import NotFoundError
from .concurrency import begin_immediate, lock_for_update


def paginate(query, page: int | None, per_page: int | None, *, default_per_page: int = 20, max_per_page: int = 100) -> dict:
    """Offset pagination returning rows plus the metadata block used by list endpoints."""
    per_page = min(per_page or default_per_page, max_per_page)
    per_page = max(per_page, 1)
    page = max(page or 1, 1)  # Ensure page >= 1

    total = query.order_by(None).count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    rows = query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": rows,
        "count": len(rows),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


class LedgerStore:
    """
    Persistence for orders, order items, coupons and discounts.

    All lookups see live (not soft-deleted) rows only. Writes become visible
    to other sessions when the enclosing `transaction()` commits.
    """

    def __init__(self, session):
        self.session = session

    @contextmanager
    def transaction(self, *, immediate: bool = False):
        """
        Commit on normal exit; roll back and re-raise on any exception.

        immediate=True takes the database write lock up front where the
        dialect needs it (SQLite).
        """
        if immediate:
            begin_immediate(self.session)
        try:
            yield self
            self.session.commit()
        except BaseException:
            self.session.rollback()
            raise

    # -- orders ---------------------------------------------------------

    def find_order(self, order_id: int, *, for_update: bool = False) -> Order:
        query = self.session.query(Order).filter(Order.id == order_id, Order.live())
        if for_update:
            query = lock_for_update(query)
        order = query.first()
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def query_orders(self, *, status: str | None = None, id_pattern: str | None = None, include_deleted: bool = False):
        query = self.session.query(Order)
        if not include_deleted:
            query = query.filter(Order.live())

        id_match = cast(Order.id, String).ilike(id_pattern) if id_pattern else None
        if status and id_match is not None:
            query = query.filter(or_(Order.status == status, id_match))
        elif status:
            query = query.filter(Order.status == status)
        elif id_match is not None:
            query = query.filter(id_match)

        return query.order_by(Order.id.desc())

    # -- coupons / discounts -------------------------------------------

    def find_coupon(self, coupon_id: int) -> Coupon:
        coupon = self.session.query(Coupon).filter(Coupon.id == coupon_id, Coupon.live()).first()
        if coupon is None:
            raise NotFoundError(f"Coupon {coupon_id} not found")
        return coupon

    def find_coupon_by_code(self, code: str) -> Coupon:
        normalized = code.strip().upper()
        coupon = (
            self.session.query(Coupon)
            .filter(func.upper(Coupon.code) == normalized, Coupon.live())
            .first()
        )
        if coupon is None:
            raise NotFoundError(f"Coupon {normalized} not found")
        return coupon

    def find_discount(self, discount_id: int) -> Discount:
        discount = (
            self.session.query(Discount)
            .filter(Discount.id == discount_id, Discount.live())
            .first()
        )
        if discount is None:
            raise NotFoundError(f"Discount {discount_id} not found")
        return discount

    def find_active_discount(self, order_id: int, coupon_id: int) -> Discount | None:
        return (
            self.session.query(Discount)
            .filter_by(order_id=order_id, coupon_id=coupon_id)
            .filter(Discount.live())
            .first()
        )

    def count_active_discounts(self, order_id: int) -> int:
        return (
            self.session.query(func.count(Discount.id))
            .filter(Discount.order_id == order_id, Discount.live())
            .scalar()
        ) or 0

    # -- catalog --------------------------------------------------------

    def find_product(self, product_id: str) -> Product | None:
        return self.session.get(Product, product_id)

    def find_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    # -- unit of work ---------------------------------------------------

    def add(self, entity) -> None:
        self.session.add(entity)

    def delete(self, entity) -> None:
        self.session.delete(entity)

    def flush(self) -> None:
        self.session.flush()

    def refresh(self, entity) -> None:
        self.session.refresh(entity)
