# tests/conftest.py
import os

# Settings are read on first import; point them at an in-memory database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from storefront.core.config import get_settings
from storefront.core.security import create_access_token, hash_password
from storefront.database import engine
from storefront.main import app
from storefront.models.cart import Cart  # noqa: F401
from storefront.models.product import Product
from storefront.models.user import User

PASSWORD = "secret1"


@pytest.fixture(autouse=True)
def fresh_database():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


def _persist(obj):
    with Session(engine) as s:
        s.add(obj)
        s.commit()
        s.refresh(obj)
    return obj


def make_user(
    email: str = "shopper@example.com",
    role: str = "user",
    is_active: bool = True,
    password: str = PASSWORD,
    **fields,
) -> User:
    return _persist(
        User(
            name=fields.pop("name", email.split("@")[0]),
            email=email,
            password=hash_password(password, rounds=4),
            role=role,
            is_active=is_active,
            **fields,
        )
    )


def make_product(**fields) -> Product:
    data = {
        "name": "Desk Lamp",
        "description": "Adjustable LED desk lamp",
        "price": 25.0,
        "category": "lighting",
        "stock": 20,
    }
    data.update(fields)
    product = Product(**data)
    product.recompute_rating()
    product.recompute_search_tags()
    return _persist(product)


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(get_settings(), user.id, user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user() -> User:
    return make_user()


@pytest.fixture
def admin() -> User:
    return make_user(email="admin@example.com", role="admin")


@pytest.fixture
def user_headers(user) -> dict[str, str]:
    return auth_headers(user)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers(admin)
