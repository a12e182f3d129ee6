import os
from decimal import Decimal
from pathlib import Path

import pytest

# przed pierwszym importem hapibara: settings czytane sa przy imporcie
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_RETRY_ATTEMPTS"] = "10"

from sqlalchemy.orm import sessionmaker  # noqa: E402

from hapibara.data.database import build_engine, init_db  # noqa: E402
from hapibara.data.models import CartItemModel, ProductModel, UserModel  # noqa: E402


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture()
def engine(tmp_path):
    # plik, nie :memory: - testy wspolbieznosci otwieraja wiele polaczen
    engine = build_engine(f"sqlite:///{tmp_path / 'hapibara.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make_user(name="Sarah Green", email=None, kindness_score=0):
        counter["n"] += 1
        user = UserModel(
            email=email or f"user{counter['n']}@example.com",
            name=name,
            kindness_score=kindness_score,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture()
def make_product(db):
    counter = {"n": 0}

    def _make_product(name="Organic Coconut Oil", price="24.99", inventory=10, category="food"):
        counter["n"] += 1
        product = ProductModel(
            slug=f"product-{counter['n']}",
            name=name,
            description=f"{name} description",
            category=category,
            brand="Pure Harvest Co.",
            price=Decimal(price),
            inventory=inventory,
        )
        db.add(product)
        db.commit()
        return product

    return _make_product


@pytest.fixture()
def put_in_cart(db):
    """Writes a cart line directly, bypassing the service checks."""

    def _put_in_cart(user, product, quantity=1, price=None):
        item = CartItemModel(
            user_id=user.id,
            product_id=product.id,
            quantity=quantity,
            price=Decimal(price) if price is not None else product.price,
        )
        db.add(item)
        db.commit()
        return item

    return _put_in_cart


@pytest.fixture()
def shipping_address():
    return {
        "name": "Sarah Green",
        "email": "sarah@example.com",
        "phone": "+1 555 0100",
        "address": "12 Kindness Lane",
        "city": "Portland",
        "state": "OR",
        "zipCode": "97201",
        "country": "US",
    }
