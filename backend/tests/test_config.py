import pytest
from pydantic import ValidationError

from medicare.config import Settings


def test_database_url_is_required(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://records:secret@db/records")
    monkeypatch.setenv("SCAN_MAX_UPLOAD_BYTES", "1024")
    settings = Settings(_env_file=None)
    assert settings.database_url == "postgresql+asyncpg://records:secret@db/records"
    assert settings.scan_max_upload_bytes == 1024
    assert settings.worker_id_prefix == "WKR"
