"""Tests for startup configuration checks."""

from config.settings import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_filebase_key_required() -> None:
    assert _settings(storage_backend="filebase", filebase_api_key="").missing_secrets() == ["FILEBASE_API_KEY"]


def test_pinata_jwt_required() -> None:
    assert _settings(storage_backend="pinata", pinata_jwt="").missing_secrets() == ["PINATA_JWT"]


def test_unknown_backend() -> None:
    assert "STORAGE_BACKEND" in _settings(storage_backend="s3").missing_secrets()


def test_complete_config() -> None:
    cfg = _settings(storage_backend="pinata", pinata_jwt="jwt", allowed_origins="https://a.io, https://b.io")

    assert cfg.missing_secrets() == []
    assert cfg.cors_origins == ["https://a.io", "https://b.io"]
