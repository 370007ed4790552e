# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from scan_kiosk.core.settings import Settings, get_settings
from scan_kiosk.main import app as fastapi_app
from scan_kiosk.services.store import KioskStore, build_file_store, build_sql_store, get_store

TEST_TIMEZONE = "Australia/Brisbane"
TEST_BASE_URL = "http://test"


def make_settings(tmp_path: Path, **overrides: object) -> Settings:
    """Build isolated settings rooted in ``tmp_path``."""
    values: dict[str, object] = {
        "data_dir": tmp_path / "data",
        "kiosk_timezone": TEST_TIMEZONE,
        "token_seed": 1000,
        "game_url": "https://flashka.onrender.com",
        "admin_key": None,
        "public_base_url": None,
        "database_url": None,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def file_store(tmp_path: Path) -> KioskStore:
    """A file-backed store in a fresh directory."""
    return build_file_store(make_settings(tmp_path))


@pytest.fixture()
def sql_store(tmp_path: Path) -> KioskStore:
    """A relational store on a fresh SQLite database file."""
    return build_sql_store(
        make_settings(tmp_path, database_url=f"sqlite:///{tmp_path / 'kiosk.db'}")
    )


@pytest.fixture(params=["file", "sql"])
def store(request: pytest.FixtureRequest) -> KioskStore:
    """Each backend in turn; both must honour the same contract."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    """Settings used by the HTTP tests."""
    return make_settings(tmp_path)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, store: KioskStore, test_settings: Settings) -> Iterator[TestClient]:
    """A client wired to the parametrised store and the test settings."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: test_settings
    try:
        with TestClient(app, base_url=TEST_BASE_URL, follow_redirects=False) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_store, None)
        app.dependency_overrides.pop(get_settings, None)
