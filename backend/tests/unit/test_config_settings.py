"""Unit tests for application settings configuration."""

import logging
from pathlib import Path

from salon.config import Settings
from salon.domain.entities import OrphanPolicy, WriteStrategy
from salon.infrastructure.logging.log_config import setup_logging


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_mirror_policies_default_to_direct_writes_and_kept_orphans():
    settings = Settings(_env_file=None)
    assert settings.write_strategy is WriteStrategy.DIRECT
    assert settings.orphan_policy is OrphanPolicy.KEEP
    assert settings.remote_store == "database"


def test_mirror_policies_read_from_environment(monkeypatch):
    monkeypatch.setenv("WRITE_STRATEGY", "feed")
    monkeypatch.setenv("ORPHAN_POLICY", "cascade")
    settings = Settings(_env_file=None)
    assert settings.write_strategy is WriteStrategy.FEED
    assert settings.orphan_policy is OrphanPolicy.CASCADE


def test_supabase_without_credentials_falls_back_to_database(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)
    settings = Settings(_env_file=None, remote_store="supabase")
    assert settings.remote_store == "database"


def test_supabase_with_credentials_is_kept():
    settings = Settings(
        _env_file=None,
        remote_store="supabase",
        supabase_url="https://example.supabase.co",
        supabase_key="anon-key",
    )
    assert settings.remote_store == "supabase"


def test_setup_logging_applies_category_levels():
    settings = Settings(_env_file=None, log_level_sql="ERROR", log_level_mirror="debug", log_level_http="bogus")
    setup_logging(settings)

    assert logging.getLogger("sqlalchemy.engine").level == logging.ERROR
    assert logging.getLogger("LocalMirror").level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.INFO
