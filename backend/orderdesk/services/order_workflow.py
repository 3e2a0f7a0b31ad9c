"""
Order Workflow - the operations behind the /api/orders endpoints.

Each operation validates its input, runs in exactly one transaction on the
Ledger Store, and either commits all of its writes or none of them. A
coupon that the Discount Policy turns down is a normal outcome reported in
`info`, not an exception.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError

from ..models import Coupon, Discount, Order
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    normalize_coupon_code,
    split_order_payload,
    validate_order_items,
    validate_payload,
)
from .concurrency import run_with_retry
from .discount_policy import DiscountPolicy, PolicyDecision
from .ledger_store import LedgerStore, paginate
from .order_service import OrderService

logger = logging.getLogger(__name__)

ORDER_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"user_id", "status"},
    required_on_create={"user_id"},
)
ORDER_UPDATE_POLICY = ModelValidationPolicy(writable_fields={"user_id", "status"})


@dataclass
class DiscountOutcome:
    order: Order
    info: dict
    discount: Discount | None = None
    reason: str = field(default="ok")

    @property
    def success(self) -> bool:
        return bool(self.info.get("success"))


class OrderWorkflow:
    """
    Facade over OrderService, DiscountPolicy and the LedgerStore.

    Collaborators are passed in; nothing is looked up from globals.
    """

    def __init__(
        self,
        store: LedgerStore,
        order_service: OrderService | None = None,
        policy: DiscountPolicy | None = None,
        *,
        retry_attempts: int = 3,
        default_per_page: int = 20,
        max_per_page: int = 100,
    ):
        self.store = store
        self.order_service = order_service or OrderService(store)
        self.policy = policy or DiscountPolicy()
        self.retry_attempts = retry_attempts
        self.default_per_page = default_per_page
        self.max_per_page = max_per_page

    def _run(self, func):
        return run_with_retry(func, session=self.store.session, attempts=self.retry_attempts)

    # -- reads ----------------------------------------------------------

    def get_order(self, order_id: int) -> Order:
        return self.store.find_order(order_id)

    def list_orders(
        self,
        *,
        status: str | None = None,
        id_pattern: str | None = None,
        page: int | None = None,
        per_page: int | None = None,
        include_deleted: bool = False,
    ) -> dict:
        query = self.store.query_orders(status=status, id_pattern=id_pattern, include_deleted=include_deleted)
        return paginate(
            query,
            page,
            per_page,
            default_per_page=self.default_per_page,
            max_per_page=self.max_per_page,
        )

    # -- order writes ---------------------------------------------------

    def create_order(self, payload: dict) -> Order:
        header, items = split_order_payload(payload)
        patch = validate_payload(model=Order, payload=header, policy=ORDER_CREATE_POLICY, partial=False)
        requested = validate_order_items(items) if items is not None else []

        def _op():
            with self.store.transaction():
                order = self.order_service.create_order(patch["user_id"], patch.get("status"), requested)
            return order

        order = self._run(_op)
        logger.info("Created order %s with %d item(s)", order.id, len(requested))
        return order

    def update_order(self, order_id: int, payload: dict) -> Order:
        header, items = split_order_payload(payload)
        patch = validate_payload(model=Order, payload=header, policy=ORDER_UPDATE_POLICY, partial=True)
        requested = validate_order_items(items) if items is not None else None

        def _op():
            with self.store.transaction():
                order = self.order_service.update_order(order_id, patch, requested)
            return order

        order = self._run(_op)
        logger.info("Updated order %s", order.id)
        return order

    def destroy_order(self, order_id: int) -> Order:
        """Soft delete; items and discounts stay as they are."""
        def _op():
            with self.store.transaction():
                order = self.store.find_order(order_id, for_update=True)
                order.soft_delete()
            return order

        order = self._run(_op)
        logger.info("Soft-deleted order %s", order.id)
        return order

    # -- discounts ------------------------------------------------------

    def apply_discount(self, order_id: int, code) -> DiscountOutcome:
        """
        Apply the coupon with `code` to an order.

        Re-applying a coupon the order already carries returns the existing
        discount instead of adding a second one.

        Raises:
            ValidationError: blank code
            NotFoundError: unknown coupon or order
            ConflictError: a concurrent writer broke the stacking rule
        """
        normalized = normalize_coupon_code(code)

        def _op():
            with self.store.transaction(immediate=True):
                coupon = self.store.find_coupon_by_code(normalized)
                order = self.store.find_order(order_id, for_update=True)
                active_count = self.store.count_active_discounts(order.id)
                decision = self.policy.evaluate(order, coupon, active_count)

                discount = None
                if decision.allowed:
                    discount = self._find_or_create_discount(order, coupon)
            return order, coupon, decision, discount

        order, coupon, decision, discount = self._run(_op)
        self._log_decision(order, coupon, decision)
        return DiscountOutcome(
            order=order,
            info={"message": decision.message, "success": decision.allowed},
            discount=discount,
            reason=decision.reason,
        )

    def _find_or_create_discount(self, order: Order, coupon: Coupon) -> Discount:
        order_id, coupon_id, code = order.id, coupon.id, coupon.code
        existing = self.store.find_active_discount(order_id, coupon_id)
        if existing is not None:
            return existing

        discount = Discount(order_id=order_id, coupon_id=coupon_id)
        self.store.add(discount)
        try:
            self.store.flush()
        except IntegrityError as exc:
            # The failed flush expired every loaded row; only plain values are safe here
            raise ConflictError(f"Coupon {code} is already applied to order {order_id}") from exc

        # Another writer may have slipped a discount in between count and insert
        if not coupon.recursive and self.store.count_active_discounts(order_id) > 1:
            raise ConflictError(f"Order {order_id} already has an active discount")
        return discount

    def remove_discount(self, discount_id: int) -> Discount:
        """Soft delete. No ownership check: any caller holding the id may remove it."""
        def _op():
            with self.store.transaction():
                discount = self.store.find_discount(discount_id)
                discount.soft_delete()
            return discount

        discount = self._run(_op)
        logger.info("Removed discount %s from order %s", discount.id, discount.order_id)
        return discount

    def _log_decision(self, order: Order, coupon: Coupon, decision: PolicyDecision) -> None:
        if decision.allowed:
            logger.info("Applied coupon %s to order %s", coupon.code, order.id)
        else:
            logger.info("Rejected coupon %s for order %s (%s)", coupon.code, order.id, decision.reason)
