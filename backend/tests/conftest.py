"""
Pytest fixtures for orderdesk backend tests.

Provides an in-memory database, per-test table cleanup, a test client, and
small factories for users, coupons, products and orders.
"""

from decimal import Decimal

import pytest
from sqlalchemy import text
from orderdesk import create_app
from orderdesk.extensions import db
from orderdesk.models import User, Coupon, Discount, Order, OrderItem, Product
from orderdesk.services.ledger_store import LedgerStore
from orderdesk.services.order_workflow import OrderWorkflow


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'DB_RETRY_ATTEMPTS': 1,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def store(db_session):
    return LedgerStore(db_session)


@pytest.fixture(scope='function')
def workflow(store):
    return OrderWorkflow(store, retry_attempts=1)


@pytest.fixture(scope='function')
def user(db_session):
    """User with id 5, the owner used throughout the order scenarios."""
    user = User(id=5, username="buyer", email="buyer@orderdesk.local")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def make_coupon(db_session):
    """Factory: make_coupon("SAVE10", recursive=False, **fields)."""
    def _make(code: str, recursive: bool = False, **fields) -> Coupon:
        fields.setdefault("is_active", True)
        coupon = Coupon(code=code.upper(), recursive=recursive, **fields)
        db_session.add(coupon)
        db_session.commit()
        return coupon
    return _make


@pytest.fixture(scope='function')
def make_order(db_session, user):
    """Factory: make_order(status="pending", items=[("P1", 2), ...])."""
    def _make(status: str = "pending", items=()) -> Order:
        order = Order(user_id=user.id, status=status)
        for product_id, quantity in items:
            order.items.append(OrderItem(product_id=product_id, quantity=quantity))
        db_session.add(order)
        db_session.commit()
        return order
    return _make


@pytest.fixture(scope='function')
def add_discount(db_session):
    """Attach an active discount row directly, bypassing the policy."""
    def _add(order: Order, coupon: Coupon) -> Discount:
        discount = Discount(order_id=order.id, coupon_id=coupon.id)
        db_session.add(discount)
        db_session.commit()
        return discount
    return _add


@pytest.fixture(scope='function')
def product(db_session):
    product = Product(id="P-PRICED", name="Priced product", price=Decimal("19.99"))
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def foreign_keys(db_session):
    """Turn on SQLite foreign key enforcement for one test."""
    db_session.commit()
    db_session.execute(text("PRAGMA foreign_keys=ON"))
    db_session.commit()
    yield
    db_session.rollback()
    db_session.execute(text("PRAGMA foreign_keys=OFF"))
    db_session.commit()
