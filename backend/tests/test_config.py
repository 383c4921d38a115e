import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import config  # noqa: E402


def test_detect_project_root_is_backend_parent(tmp_path):
    backend_dir = tmp_path / "project" / "backend"
    backend_dir.mkdir(parents=True, exist_ok=True)

    assert config._detect_project_root(backend_dir) == (tmp_path / "project").resolve()


def test_normalize_database_url_anchors_relative_sqlite_path(tmp_path, monkeypatch):
    project_root = tmp_path / "project"
    monkeypatch.setattr(config, "_PROJECT_ROOT", project_root.resolve())

    normalized = config.Settings._normalize_database_url(
        "sqlite+aiosqlite:///./data/points.db"
    )

    expected = (project_root / "data" / "points.db").resolve()
    assert normalized == f"sqlite+aiosqlite:///{expected}"
    assert config.sqlite_database_path(normalized) == expected


def test_normalize_database_url_keeps_memory_and_other_drivers():
    assert config.Settings._normalize_database_url("sqlite+aiosqlite:///:memory:") == "sqlite+aiosqlite:///:memory:"
    assert config.sqlite_database_path("sqlite+aiosqlite:///:memory:") is None

    pg = "postgresql+asyncpg://user:pw@db/points"
    assert config.Settings._normalize_database_url(f'"{pg}"') == pg
    assert config.sqlite_database_path(pg) is None


def test_api_base_url_is_trimmed(monkeypatch):
    monkeypatch.setenv("POINTS_API_BASE_URL", ' "https://analytics.example.com/" ')

    settings = config.Settings(_env_file=None)

    assert settings.POINTS_API_BASE_URL == "https://analytics.example.com"


def test_source_timeout_must_be_positive(monkeypatch):
    monkeypatch.setenv("POINTS_SOURCE_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValidationError):
        config.Settings(_env_file=None)


def test_defaults_match_cache_windows(monkeypatch):
    for name in ("RANKS_CACHE_TTL_SECONDS", "MEME_TOKENS_CACHE_TTL_SECONDS", "POINTS_SOURCE_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    settings = config.Settings(_env_file=None)

    assert settings.RANKS_CACHE_TTL_SECONDS == 60
    assert settings.MEME_TOKENS_CACHE_TTL_SECONDS == 300
    assert settings.POINTS_SOURCE_TIMEOUT_SECONDS == 10
