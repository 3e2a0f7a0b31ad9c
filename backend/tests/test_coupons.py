# Overview: Pytest coverage for coupon administration.

from datetime import timedelta

import pytest

from orderdesk.services import coupon_service
from orderdesk.services.ledger_store import LedgerStore
from orderdesk.time_utils import utcnow, to_utc_z
from orderdesk.validation import ConflictError, NotFoundError, ValidationError


class TestCouponService:

    def test_code_is_stored_upper_case(self, db_session):
        coupon = coupon_service.create_coupon({"code": "save10", "recursive": True})
        assert coupon["code"] == "SAVE10"
        assert coupon["recursive"] is True
        assert coupon["is_active"] is True

    def test_duplicate_code_ignores_case(self, db_session):
        coupon_service.create_coupon({"code": "SAVE10"})
        with pytest.raises(ConflictError):
            coupon_service.create_coupon({"code": "Save10"})

    def test_code_required(self, db_session):
        with pytest.raises(ValidationError):
            coupon_service.create_coupon({"recursive": True})

    def test_window_must_be_ordered(self, db_session):
        now = utcnow()
        with pytest.raises(ValidationError):
            coupon_service.create_coupon({
                "code": "BACKWARDS",
                "valid_from": to_utc_z(now),
                "valid_until": to_utc_z(now - timedelta(days=1)),
            })

    def test_update_and_soft_delete(self, db_session):
        created = coupon_service.create_coupon({"code": "SAVE10"})

        updated = coupon_service.update_coupon(created["id"], {"recursive": True, "description": "stackable"})
        assert updated["recursive"] is True
        assert updated["description"] == "stackable"

        deleted = coupon_service.delete_coupon(created["id"])
        assert deleted["deleted_at"] is not None
        with pytest.raises(NotFoundError):
            coupon_service.get_coupon(created["id"])
        with pytest.raises(NotFoundError):
            LedgerStore(db_session).find_coupon_by_code("SAVE10")
        assert coupon_service.list_coupons() == []

    def test_list_active_only(self, db_session):
        coupon_service.create_coupon({"code": "ON"})
        coupon_service.create_coupon({"code": "OFF", "is_active": False})
        assert [c["code"] for c in coupon_service.list_coupons(active_only=True)] == ["ON"]


class TestCouponsAPI:

    def test_create_and_fetch(self, client, db_session):
        response = client.post("/api/coupons", json={"code": "welcome"})
        assert response.status_code == 201
        coupon_id = response.get_json()["id"]

        fetched = client.get(f"/api/coupons/{coupon_id}")
        assert fetched.get_json()["code"] == "WELCOME"

    def test_conflict(self, client, db_session):
        client.post("/api/coupons", json={"code": "WELCOME"})
        assert client.post("/api/coupons", json={"code": "welcome"}).status_code == 409

    def test_unknown_field(self, client, db_session):
        assert client.post("/api/coupons", json={"code": "X", "percent": 10}).status_code == 400

    def test_patch_and_delete(self, client, db_session):
        coupon_id = client.post("/api/coupons", json={"code": "WELCOME"}).get_json()["id"]

        patched = client.patch(f"/api/coupons/{coupon_id}", json={"is_active": False})
        assert patched.get_json()["is_active"] is False

        assert client.delete(f"/api/coupons/{coupon_id}").status_code == 200
        assert client.get(f"/api/coupons/{coupon_id}").status_code == 404
