"""
Core plumbing: settings, admin guard, logging, storage selection.
"""
import json
import logging

import pytest
from fastapi import HTTPException

from esports_arena.core.config import Settings, settings
from esports_arena.core.logging import JSONFormatter, clear_correlation_id, get_correlation_id, set_correlation_id
from esports_arena.core.security import hash_password, require_admin, verify_password
from esports_arena.storage import DatabaseStorage, MemStorage, create_storage


class TestSettings:

    def test_production_requires_database(self):
        production = Settings(ENVIRONMENT="production", STORAGE_BACKEND="memory")

        assert "STORAGE_BACKEND" in production.validate_required_secrets()
        assert "DATABASE_URL" in production.validate_required_secrets()

    def test_production_with_database_is_complete(self):
        production = Settings(
            ENVIRONMENT="production",
            STORAGE_BACKEND="database",
            DATABASE_URL="postgresql://arena@db/arena",
        )

        assert production.validate_required_secrets() == []

    def test_development_needs_nothing_extra(self):
        assert Settings(ENVIRONMENT="development", RATE_LIMIT_ENABLED=True).validate_required_secrets() == []

    def test_cors_origins_from_string(self):
        configured = Settings(CORS_ORIGINS_STR="https://arena.example.com, https://admin.example.com")

        assert configured.CORS_ORIGINS == ["https://arena.example.com", "https://admin.example.com"]


class TestRequireAdmin:

    def test_open_without_token(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_TOKEN", "")

        assert require_admin(None) == settings.DEFAULT_ADMIN_ID

    def test_refused_in_production_without_token(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_TOKEN", "")
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")

        with pytest.raises(HTTPException) as exc_info:
            require_admin(None)
        assert exc_info.value.status_code == 401


def test_password_hashing():
    hashed = hash_password("password123")

    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("wrong", hashed)


def test_json_formatter_includes_correlation_id():
    token = set_correlation_id("req-42")
    try:
        record = logging.LogRecord("arena", logging.INFO, __file__, 1, "Deleted team 3", None, None)
        record.entity_id = 3
        payload = json.loads(JSONFormatter().format(record))
    finally:
        clear_correlation_id(token)

    assert payload["message"] == "Deleted team 3"
    assert payload["correlation_id"] == "req-42"
    assert payload["extra"]["entity_id"] == 3


def test_correlation_id_is_scoped():
    assert get_correlation_id() == ""

    token = set_correlation_id("req-7")
    assert get_correlation_id() == "req-7"
    clear_correlation_id(token)

    assert get_correlation_id() == ""


class TestCreateStorage:

    def test_memory_backend(self):
        store = create_storage(Settings(STORAGE_BACKEND="memory", SEED_DEMO_DATA=False))

        assert isinstance(store, MemStorage)
        assert store.get_users_count() == 0

    def test_database_backend(self, monkeypatch):
        from esports_arena.core import database

        monkeypatch.setattr(database, "_engine", database.build_engine("sqlite://"))
        monkeypatch.setattr(
            database,
            "_SessionLocal",
            database.sessionmaker(bind=database._engine, expire_on_commit=False),
        )

        store = create_storage(Settings(STORAGE_BACKEND="database"))

        assert isinstance(store, DatabaseStorage)
        assert store.get_games() == []
