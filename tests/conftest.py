"""Shared pytest fixtures."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from config import TestingConfig  # noqa: E402
from ratecache import create_app  # noqa: E402
from ratecache.database import SessionLocal, get_engine  # noqa: E402
from ratecache.models import CachedRate, CachedSnapshot  # noqa: E402

FIXER_BASE_URL = "https://fixer.test/api"


@pytest.fixture(scope="session")
def app(tmp_path_factory: pytest.TempPathFactory) -> Iterator:
    """Session-wide Flask application configured with a temporary database."""

    db_dir = tmp_path_factory.mktemp("db")
    database_url = f"sqlite:///{db_dir / 'test.db'}"

    alembic_cfg = Config(str(ROOT_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(alembic_cfg, "head")

    mp = pytest.MonkeyPatch()
    mp.setattr(TestingConfig, "SQLALCHEMY_DATABASE_URI", database_url)
    mp.setattr(TestingConfig, "FIXER_API_BASE_URL", FIXER_BASE_URL)
    mp.setattr(TestingConfig, "FIXER_MAX_RETRIES", 2)

    flask_app = create_app("testing")

    yield flask_app

    engine = get_engine()
    SessionLocal.remove()
    engine.dispose()
    command.downgrade(alembic_cfg, "base")
    mp.undo()


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


@pytest.fixture()
def db_session(app) -> Iterator:
    """Provide a session on an empty cache; rows are removed again afterwards."""

    session = SessionLocal()
    _clear_tables(session)
    try:
        yield session
    finally:
        session.rollback()
        _clear_tables(session)
        SessionLocal.remove()


@pytest.fixture()
def restrictions(app):
    """The app's restricted-credential set, emptied around each test."""

    credentials = app.extensions["restricted_credentials"]
    credentials.clear()
    yield credentials
    credentials.clear()


def _clear_tables(session) -> None:
    session.query(CachedRate).delete()
    session.query(CachedSnapshot).delete()
    session.commit()
    session.expunge_all()


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    """Return the path to bundled JSON fixtures."""

    return ROOT_DIR / "tests" / "fixtures"


@pytest.fixture()
def load_json_fixture(fixtures_dir: Path) -> Callable[[str], dict]:
    """Load a JSON fixture by filename."""

    def _loader(filename: str) -> dict:
        path = fixtures_dir / filename
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    return _loader
