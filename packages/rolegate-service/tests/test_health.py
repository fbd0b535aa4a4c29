"""Health endpoint tests."""

import asyncio

from rolegate_service.db.engine import close_db, init_db


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_before_database_init(client):
    response = client.get("/health/ready")
    assert response.status_code == 503


def test_ready_after_database_init(client):
    asyncio.run(init_db("sqlite+aiosqlite:///:memory:"))
    try:
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}
    finally:
        asyncio.run(close_db())
