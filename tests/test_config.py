"""Tests for environment settings."""

import pytest

from offer_engine.config import DEFAULT_STORE_PATH, Settings
from offer_engine.session import OfferSession
from offer_engine.storage import InMemoryStore, JsonFileStore, S3ObjectStorage

ENV_VARS = (
    "OFFER_ENGINE_ENV", "HOST", "PORT", "OFFER_STORE_PATH", "OFFER_OBJECT_STORAGE", "OFFER_BUCKET",
    "OFFER_USER_ID", "OFFER_S3_ENDPOINT_URL", "AWS_REGION", "OFFER_SMALL_FILE_LIMIT",
    "OFFER_SIGNED_URL_TTL", "OFFER_UPLOAD_LARGE_ONLY",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:

    def test_defaults(self, clean_env):
        settings = Settings.from_env()
        assert settings.port == 8080
        assert settings.store_path == DEFAULT_STORE_PATH
        assert settings.object_storage == "s3"
        assert settings.bucket == "offers"
        assert settings.small_file_limit == 500000
        assert settings.signed_url_ttl == 604800
        assert settings.upload_large_only is False

    def test_overrides(self, clean_env):
        clean_env.setenv("PORT", "9000")
        clean_env.setenv("OFFER_OBJECT_STORAGE", "NONE")
        clean_env.setenv("OFFER_UPLOAD_LARGE_ONLY", "yes")
        clean_env.setenv("OFFER_SMALL_FILE_LIMIT", "1000")

        settings = Settings.from_env()
        assert settings.port == 9000
        assert settings.object_storage == "none"
        assert settings.upload_large_only is True
        assert settings.small_file_limit == 1000

    def test_bad_integer(self, clean_env):
        clean_env.setenv("PORT", "eighty")
        with pytest.raises(ValueError, match="PORT"):
            Settings.from_env()

    def test_bad_object_storage(self, clean_env):
        clean_env.setenv("OFFER_OBJECT_STORAGE", "gcs")
        with pytest.raises(ValueError, match="OFFER_OBJECT_STORAGE"):
            Settings.from_env()


class TestSessionFromSettings:

    def test_in_memory_without_object_storage(self):
        session = OfferSession.from_settings(Settings(store_path="", object_storage="none"))
        assert isinstance(session.repository.store, InMemoryStore)
        assert session.attachment_store.object_storage is None

    def test_file_store_and_s3(self, tmp_path):
        settings = Settings(store_path=str(tmp_path / "store.json"), object_storage="s3", bucket="b1")
        session = OfferSession.from_settings(settings)

        assert isinstance(session.repository.store, JsonFileStore)
        assert isinstance(session.attachment_store.object_storage, S3ObjectStorage)
        assert session.attachment_store.bucket == "b1"

    def test_file_store_persists_between_sessions(self, tmp_path):
        settings = Settings(store_path=str(tmp_path / "store.json"), object_storage="none")
        first = OfferSession.from_settings(settings)
        first.update(city="Boise")
        saved = first.save("Boise offer")

        second = OfferSession.from_settings(settings)
        assert second.draft.city == "Boise"
        assert [m.id for m in second.list_drafts()] == [saved.id]
