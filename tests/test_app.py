# tests/test_app.py
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from teashop.core.config import Settings
from teashop.core.errors import (
    ConflictError,
    InsufficientStockError,
    register_exception_handlers,
)
from teashop.database import build_database_url


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "teashop-backend"}


@pytest.fixture
def error_app() -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/stock")
    def stock():
        raise InsufficientStockError()

    @app.get("/integrity")
    def integrity():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    @app.get("/boom")
    def boom():
        raise RuntimeError("unexpected")

    return TestClient(app, raise_server_exceptions=False)


def test_typed_error_envelope(error_app):
    response = error_app.get("/stock")
    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Insufficient stock"}
    assert issubclass(InsufficientStockError, ConflictError)


def test_integrity_error_is_conflict(error_app):
    response = error_app.get("/integrity")
    assert response.status_code == 409
    assert response.json()["success"] is False


def test_unhandled_error_is_500(error_app):
    response = error_app.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.parametrize(
    "env, expected",
    [
        ({"DATABASE_URL": "sqlite:///x.db", "DB_HOST": "db"}, "sqlite:///x.db"),
        ({"SQLITE_PATH": "./shop.db"}, "sqlite:///./shop.db"),
        (
            {"DB_HOST": "db", "DB_USER": "tea", "DB_PASSWORD": "pw", "DB_SSLMODE": "require"},
            "postgresql+psycopg2://tea:pw@db:5432/teashop?sslmode=require",
        ),
    ],
)
def test_build_database_url(env, expected):
    values = {"JWT_SECRET": "x", "DATABASE_URL": None, **env}
    cfg = Settings(_env_file=None, **values)
    assert build_database_url(cfg) == expected
