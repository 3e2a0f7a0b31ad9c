"""
Coupon eligibility and stacking rules.

Pure decisions only: callers load the order, coupon and active discount
count, and persist whatever the decision allows.

Stacking rule: a coupon may be applied when the order has no active
discounts, or when the incoming coupon is `recursive`. Coupons already on
the order are not consulted, so a recursive coupon can stack on top of a
non-recursive one.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ..models import Coupon, Order
from orderdesk.time_utils import normalize_utc, utcnow


APPLIED_MESSAGE = "Coupon successfully applied"
REJECTED_MESSAGE = "This coupon could not be applied"

REASON_OK = "ok"
REASON_INELIGIBLE = "ineligible"
REASON_STACKING = "stacking"

EligibilityCheck = Callable[[Order, Coupon, datetime], bool]


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    reason: str
    message: str


def can_stack(active_count: int, recursive: bool) -> bool:
    return active_count < 1 or (active_count >= 1 and bool(recursive))


def coupon_is_valid(order: Order, coupon: Coupon, now: datetime) -> bool:
    """Default eligibility: coupon is live, enabled, and inside its validity window."""
    if coupon.is_deleted or not coupon.is_active:
        return False
    valid_from = normalize_utc(coupon.valid_from)
    valid_until = normalize_utc(coupon.valid_until)
    if valid_from is not None and now < valid_from:
        return False
    if valid_until is not None and now > valid_until:
        return False
    return True


class DiscountPolicy:
    def __init__(self, eligibility: EligibilityCheck = coupon_is_valid):
        self.eligibility = eligibility

    def evaluate(self, order: Order, coupon: Coupon, active_count: int, now: datetime | None = None) -> PolicyDecision:
        now = now or utcnow()
        if not self.eligibility(order, coupon, now):
            return PolicyDecision(False, REASON_INELIGIBLE, REJECTED_MESSAGE)
        if not can_stack(active_count, coupon.recursive):
            return PolicyDecision(False, REASON_STACKING, REJECTED_MESSAGE)
        return PolicyDecision(True, REASON_OK, APPLIED_MESSAGE)
