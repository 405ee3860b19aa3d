"""Unit tests for the Pydantic settings classes."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from campus_service.core.settings import (
    AppSettings,
    AuthSettings,
    DatabaseSettings,
    PaginationSettings,
    TagSettings,
    clear_all_caches,
    get_app_settings,
    get_auth_settings,
    get_tag_settings,
)


@pytest.mark.unit
class TestAppSettings:
    def test_environment_comes_from_env(self):
        settings = AppSettings()

        assert settings.environment == "test"
        assert settings.service_name == "campus-service"
        assert settings.api_prefix == "/api/v1"

    def test_frozen(self):
        settings = AppSettings()

        with pytest.raises(ValidationError):
            settings.debug = True

    def test_invalid_service_name(self):
        with pytest.raises(ValidationError):
            AppSettings(service_name="Campus Service")


@pytest.mark.unit
class TestDatabaseSettings:
    def test_full_url_wins(self):
        settings = DatabaseSettings(dsn="sqlite+aiosqlite:///./x.db")

        assert settings.get_sqlalchemy_url() == "sqlite+aiosqlite:///./x.db"
        assert settings.is_sqlite

    def test_components_build_postgres_url(self, monkeypatch):
        monkeypatch.delenv("DB_DATABASE_URL", raising=False)
        settings = DatabaseSettings(user="campus", password="p@ss", host="db", port=5433, name="tags")

        assert settings.get_sqlalchemy_url() == "postgresql+psycopg://campus:p%40ss@db:5433/tags"
        assert not settings.is_sqlite


@pytest.mark.unit
class TestPaginationSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PAGINATION_DEFAULT_PAGE_SIZE", "PAGINATION_MAX_PAGE_SIZE", "PAGINATION_STALE_CURSOR_POLICY"):
            monkeypatch.delenv(name, raising=False)
        settings = PaginationSettings()

        assert settings.default_page_size == 10
        assert settings.max_page_size == 30
        assert settings.stale_cursor_policy == "error"

    def test_default_must_not_exceed_max(self):
        with pytest.raises(ValidationError):
            PaginationSettings(default_page_size=50, max_page_size=30)

    def test_unknown_stale_cursor_policy(self):
        with pytest.raises(ValidationError):
            PaginationSettings(stale_cursor_policy="ignore")


@pytest.mark.unit
class TestTagSettings:
    def test_threshold_from_env(self):
        assert TagSettings().default_archived_threshold == 2

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            TagSettings(default_archived_threshold=-1)

    def test_vote_attempts_bounds(self):
        with pytest.raises(ValidationError):
            TagSettings(vote_max_attempts=0)


@pytest.mark.unit
class TestAuthSettings:
    def test_admins_from_env(self):
        settings = AuthSettings()

        assert settings.mock_mode is True
        assert settings.admin_user_ids == ["admin"]
        assert settings.token_header == "X-Auth-Token"
        assert settings.is_configured

    def test_unconfigured_without_url_or_mock(self):
        assert not AuthSettings(mock_mode=False, service_url=None).is_configured


@pytest.mark.unit
class TestLoaders:
    def test_loaders_are_cached(self):
        assert get_app_settings() is get_app_settings()

    def test_clear_all_caches_reloads(self, monkeypatch):
        first = get_tag_settings()
        monkeypatch.setenv("TAGS_DEFAULT_ARCHIVED_THRESHOLD", "7")
        clear_all_caches()

        assert get_tag_settings() is not first
        assert get_tag_settings().default_archived_threshold == 7
        assert get_auth_settings().mock_mode is True
