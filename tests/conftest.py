# tests/conftest.py
"""Shared fixtures: in-memory SQLite, fresh tables per test, API client, users."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before app.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["WS_TRUST_CLIENT_IDENTITY"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.database import SessionLocal, create_tables, drop_tables


@pytest.fixture(autouse=True)
def fresh_tables():
    create_tables()
    yield
    drop_tables()


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    from app.main import app
    with TestClient(app) as c:
        yield c


def register(client, username, password="secret123"):
    resp = client.post("/api/register", json={
        "username": username, "email": f"{username}@example.com", "password": password,
    })
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["user"]["id"], body["token"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def alice(client):
    return register(client, "alice")


@pytest.fixture()
def bob(client):
    return register(client, "bob")
