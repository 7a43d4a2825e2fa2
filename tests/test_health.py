"""
Health check route
"""

import asyncpg

from database import connection


def test_healthy_when_database_answers(api_client, monkeypatch, fake_pool):
    monkeypatch.setattr(connection, "db_pool", fake_pool)

    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "connected"
    assert fake_pool.connection.statements[0][1] == "SELECT 1"


def test_unhealthy_without_pool(api_client, monkeypatch):
    monkeypatch.setattr(connection, "db_pool", None)

    response = api_client.get("/health")

    assert response.status_code == 503
    assert response.json()["error"]["type"] == "CONNECTION_ERROR"


def test_unhealthy_when_select_fails(api_client, monkeypatch, fake_pool):
    fake_pool.connection.error = asyncpg.PostgresError("the database system is in recovery mode")
    monkeypatch.setattr(connection, "db_pool", fake_pool)

    response = api_client.get("/health")

    assert response.status_code == 503
    assert response.json()["error"]["type"] == "CONNECTION_ERROR"
    assert "recovery" not in response.json()["error"]["message"]
