"""
Pytest configuration and fixtures.

Kazdy test dostaje swieza baze SQLite w pliku (tmp_path), zeby watki
w testach wspolbieznosci mialy osobne polaczenia do tej samej bazy.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["LOCK_BACKEND"] = "local"
os.environ["SEED_PRODUCTS"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api import create_app
from app.data.database import build_engine, get_db, init_db
from app.data.models.product import ProductModel
from app.services.cart_service import CartService
from app.services.checkout_service import CheckoutService
from app.services.lock_service import LocalLockService, get_lock_service


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'cart.db'}")
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=True, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def lock_service():
    return LocalLockService()


@pytest.fixture
def make_product(db):
    def _make(name="Widget", price="10.00", stock=5, category="Electronics", description=None):
        product = ProductModel(
            name=name,
            description=description,
            price=Decimal(price),
            stock_quantity=stock,
            category=category,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def product(make_product):
    """price 10.00, stock 5"""
    return make_product()


@pytest.fixture
def cart_service(db, lock_service):
    return CartService(db, lock_service)


@pytest.fixture
def checkout_service(db, lock_service):
    return CheckoutService(db, lock_service)


@pytest.fixture
def stock_of(session_factory):
    """Czyta stan magazynu osobna sesja - to co widzi reszta swiata."""

    def _stock(product_id):
        session = session_factory()
        try:
            return session.get(ProductModel, product_id).stock_quantity
        finally:
            session.close()

    return _stock


@pytest.fixture
def client(session_factory, lock_service):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service

    with TestClient(app) as test_client:
        yield test_client
