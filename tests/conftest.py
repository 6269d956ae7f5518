"""Pytest fixtures for marketplace tests."""

import os
import tempfile

# aplikacja tworzy tabele przy imporcie - kieruj ja na plik tymczasowy
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{os.path.join(tempfile.gettempdir(), 'marketplace-app-test.db')}",
)

from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from marketplace.data.database import build_engine, init_db
from marketplace.data.models.product import ProductModel
from marketplace.data.models.user import UserModel
from marketplace.services.cart_service import CartService
from marketplace.services.order_security_service import OrderSecurityService
from marketplace.services.order_service import OrderService


class FakeLockService:
    """In-process double for LockService (same contract as SET NX / compare-and-delete)."""

    def __init__(self):
        self.held = {}
        self.calls = []

    def acquire_checkout_lock(self, user_id, token, ttl=30):
        self.calls.append(("acquire", user_id))
        if user_id in self.held:
            return False
        self.held[user_id] = token
        return True

    def release_checkout_lock(self, user_id, token):
        self.calls.append(("release", user_id))
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class RecordingNotifier:
    def __init__(self):
        self.created = []
        self.status_changes = []

    def send_order_created(self, user_id, order_id, order_number):
        self.created.append((user_id, order_id, order_number))

    def send_status_changed(self, user_id, order_id, old_status, new_status):
        self.status_changes.append((order_id, old_status, new_status))


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'marketplace.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def order_service(db, lock_service, notifier):
    return OrderService(
        db,
        lock_service=lock_service,
        notification_service=notifier,
        security=OrderSecurityService(seller_fallback=False),
    )


@pytest.fixture
def cart_service(db):
    return CartService(db)


@pytest.fixture
def make_user(db):
    def _make(username):
        user = UserModel(username=username)
        db.add(user)
        db.commit()
        return user.id

    return _make


@pytest.fixture
def make_product(db):
    def _make(seller_id, price="10.00", stock=5, discount="0", available=True, name="Produkt"):
        product = ProductModel(
            creator_id=seller_id,
            name=name,
            price=Decimal(price),
            discount=Decimal(discount),
            stock_quantity=stock,
            sales_count=0,
            is_available=available,
        )
        db.add(product)
        db.commit()
        return product.id

    return _make


@pytest.fixture
def seller(make_user):
    return make_user("seller")


@pytest.fixture
def buyer(make_user):
    return make_user("buyer")


@pytest.fixture
def stranger(make_user):
    return make_user("stranger")


@pytest.fixture
def product_state(session_factory):
    """Read (stock_quantity, sales_count) through a fresh session."""

    def _read(product_id):
        with session_factory() as session:
            product = session.get(ProductModel, product_id)
            return product.stock_quantity, product.sales_count

    return _read
