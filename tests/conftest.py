from __future__ import annotations

import os
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from branchout.app import create_flask_app
from branchout.config.settings import Settings
from branchout.models.types import ContentItem
from branchout.processors.adapter import Adapter
from branchout.processors.completion import RemoteCompleter
from branchout.storage.database import Database


def _message(text: str) -> SimpleNamespace:
    """Shape of an Anthropic Messages API reply with a single text block."""
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


@pytest.fixture
def sample_content_item() -> ContentItem:
    """A fully-populated ContentItem for use in tests."""
    return ContentItem(
        id="content-001",
        user_id="user-1",
        title="Launch day",
        original_content="Just launched my app! It took six months. Try it today.",
        created_at=datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def anthropic_client() -> MagicMock:
    """A stand-in for anthropic.Anthropic whose replies tests can script."""
    client = MagicMock()
    client.messages.create.return_value = _message("Adapted by the model")
    return client


@pytest.fixture
def completer(anthropic_client) -> RemoteCompleter:
    return RemoteCompleter(client=anthropic_client, model="test-model")


@pytest.fixture
def temp_database(tmp_path):
    """A Database backed by a temporary SQLite file, cleaned up after the test."""
    db_file = str(tmp_path / "test_branchout.db")
    db = Database(db_path=db_file)
    yield db
    db.close()
    if os.path.exists(db_file):
        os.remove(db_file)


@pytest.fixture
def app(temp_database):
    settings = Settings(database_path=":memory:", log_file=None)
    flask_app = create_flask_app(settings, temp_database, Adapter())
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": "user-1"}


@pytest.fixture
def make_message():
    return _message
