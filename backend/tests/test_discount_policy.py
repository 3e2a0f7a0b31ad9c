# Overview: Pytest coverage for coupon eligibility and stacking decisions.

from datetime import timedelta

import pytest

from orderdesk.models import Coupon, Order
from orderdesk.services.discount_policy import (
    APPLIED_MESSAGE,
    REJECTED_MESSAGE,
    REASON_INELIGIBLE,
    REASON_OK,
    REASON_STACKING,
    DiscountPolicy,
    can_stack,
    coupon_is_valid,
)
from orderdesk.time_utils import utcnow


def _coupon(**fields) -> Coupon:
    fields.setdefault("code", "SAVE10")
    fields.setdefault("recursive", False)
    fields.setdefault("is_active", True)
    return Coupon(**fields)


class TestStackingRule:

    @pytest.mark.parametrize("recursive", [False, True])
    def test_first_discount_always_stacks(self, recursive):
        assert can_stack(0, recursive) is True

    @pytest.mark.parametrize("active_count", [1, 2, 3, 10])
    def test_recursive_stacks_on_any_count(self, active_count):
        assert can_stack(active_count, True) is True

    @pytest.mark.parametrize("active_count", [1, 2, 3, 10])
    def test_non_recursive_blocked_once_order_has_discount(self, active_count):
        assert can_stack(active_count, False) is False


class TestEligibility:

    def test_active_coupon_without_window_is_valid(self):
        assert coupon_is_valid(Order(), _coupon(), utcnow()) is True

    def test_disabled_coupon_is_invalid(self):
        assert coupon_is_valid(Order(), _coupon(is_active=False), utcnow()) is False

    def test_soft_deleted_coupon_is_invalid(self):
        coupon = _coupon()
        coupon.soft_delete()
        assert coupon_is_valid(Order(), coupon, utcnow()) is False

    def test_expired_coupon_is_invalid(self):
        now = utcnow()
        coupon = _coupon(valid_until=now - timedelta(days=1))
        assert coupon_is_valid(Order(), coupon, now) is False

    def test_future_coupon_is_invalid(self):
        now = utcnow()
        coupon = _coupon(valid_from=now + timedelta(hours=1))
        assert coupon_is_valid(Order(), coupon, now) is False

    def test_inside_window_is_valid(self):
        now = utcnow()
        coupon = _coupon(valid_from=now - timedelta(days=1), valid_until=now + timedelta(days=1))
        assert coupon_is_valid(Order(), coupon, now) is True


class TestDiscountPolicy:

    def test_allows_first_coupon(self):
        decision = DiscountPolicy().evaluate(Order(), _coupon(), active_count=0)
        assert decision.allowed is True
        assert decision.reason == REASON_OK
        assert decision.message == APPLIED_MESSAGE

    def test_rejects_non_recursive_on_discounted_order(self):
        decision = DiscountPolicy().evaluate(Order(), _coupon(), active_count=1)
        assert decision.allowed is False
        assert decision.reason == REASON_STACKING
        assert decision.message == REJECTED_MESSAGE

    def test_eligibility_is_checked_before_stacking(self):
        decision = DiscountPolicy().evaluate(Order(), _coupon(is_active=False), active_count=3)
        assert decision.reason == REASON_INELIGIBLE

    def test_injected_eligibility_is_anded_with_stacking(self):
        seen = []

        def never(order, coupon, now):
            seen.append(coupon.code)
            return False

        decision = DiscountPolicy(eligibility=never).evaluate(Order(), _coupon(recursive=True), active_count=0)
        assert decision.allowed is False
        assert decision.reason == REASON_INELIGIBLE
        assert seen == ["SAVE10"]

    def test_only_incoming_coupon_flag_matters(self):
        # The order may already carry non-recursive coupons; a recursive one still stacks
        decision = DiscountPolicy().evaluate(Order(), _coupon(code="STACK", recursive=True), active_count=2)
        assert decision.allowed is True
