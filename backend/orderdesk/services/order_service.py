"""
Order Service - order header writes and line-item reconciliation.

Runs inside a transaction owned by the caller; nothing here commits or
rolls back, so item writes compose with discount writes in one unit.
"""
from __future__ import annotations

import logging

from ..models import Order, OrderItem, DEFAULT_ORDER_STATUS
from ..validation import ValidationError, validate_order_items
from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)

ORDER_PATCH_FIELDS = ("user_id", "status")


class OrderService:
    def __init__(self, store: LedgerStore):
        self.store = store

    def create_order(self, user_id: int, status: str | None, items: list[dict] | None) -> Order:
        """Insert the order header, then one line per requested item."""
        if user_id is None:
            raise ValidationError("Missing required fields: user_id")
        self._require_user(user_id)

        order = Order(user_id=user_id, status=status or DEFAULT_ORDER_STATUS)
        self.store.add(order)
        self.store.flush()

        if items:
            self.sync_items(order, items)
        return order

    def update_order(self, order_id: int, patch: dict, items: list[dict] | None = None) -> Order:
        """
        Apply header patch; when `items` is given, make the item set match it exactly.

        items=None leaves lines untouched, items=[] removes every line.
        """
        order = self.store.find_order(order_id, for_update=True)

        if patch.get("user_id") is not None:
            self._require_user(patch["user_id"])

        for key in ORDER_PATCH_FIELDS:
            if patch.get(key) is not None:
                setattr(order, key, patch[key])

        if items is not None:
            self.sync_items(order, items)

        self.store.flush()
        return order

    def sync_items(self, order: Order, items: list[dict]) -> Order:
        """
        Reconcile order lines against `items`, keyed by product_id.

        New products are inserted, missing products removed, and existing
        lines kept in place (quantity/price updated only when they differ).
        """
        requested = validate_order_items(items)
        existing = {item.product_id: item for item in order.items}
        wanted = {entry["product_id"] for entry in requested}

        for product_id, line in list(existing.items()):
            if product_id not in wanted:
                order.items.remove(line)

        # Deletes must reach the database before re-inserts of the same product
        self.store.flush()

        added = updated = 0
        for entry in requested:
            line = existing.get(entry["product_id"])
            if line is None:
                self._add_item(order, entry["product_id"], entry["quantity"], self._price_snapshot(entry))
                added += 1
                continue
            changed = False
            if line.quantity != entry["quantity"]:
                line.quantity = entry["quantity"]
                changed = True
            if entry["price"] is not None and line.price != entry["price"]:
                line.price = entry["price"]
                changed = True
            updated += changed

        self.store.flush()
        logger.debug(
            "Synced items for order %s: %d added, %d updated, %d removed",
            order.id, added, updated, len(existing.keys() - wanted),
        )
        return order

    def _require_user(self, user_id: int) -> None:
        # Owner must exist before the header is flushed
        if self.store.find_user(user_id) is None:
            raise ValidationError(f"User {user_id} does not exist")

    def _price_snapshot(self, entry: dict):
        if entry["price"] is not None:
            return entry["price"]
        product = self.store.find_product(entry["product_id"])
        return product.price if product is not None else None

    def _add_item(self, order: Order, product_id: str, quantity: int, price) -> OrderItem:
        line = OrderItem(product_id=product_id, quantity=quantity, price=price)
        order.items.append(line)
        self.store.flush()
        return line
