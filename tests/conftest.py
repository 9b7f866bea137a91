import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from security import create_token

SECRET = "test-secret"


@pytest.fixture
def settings():
    return Settings(jwt_token_secret=SECRET, bcrypt_rounds=4, db_name="test_catalog")


@pytest.fixture
def app(settings):
    return create_app(settings, client=mongomock.MongoClient())


@pytest.fixture
def client(app):
    # entering the context runs the lifespan hook (index creation)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer " + create_token("admin@shop.com", SECRET)}


@pytest.fixture
def product_payload():
    return [
        {
            "product_name": "laptop",
            "price": 30000,
            "currency": "USD",
            "quantity": 344,
            "discount": 0,
            "vendor": "m",
            "accessories": ["media", "phone"],
            "is_essential": True,
        },
        {
            "product_name": "tivi",
            "price": 4000,
            "currency": "USD",
            "quantity": 34,
            "discount": 1000,
            "vendor": "a",
            "accessories": ["media", "phone"],
            "is_essential": False,
        },
    ]
