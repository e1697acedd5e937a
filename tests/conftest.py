import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.store.file import JsonFileRecordStore
from app.store.sql import SqlRecordStore
from tests.helpers import make_settings


@pytest.fixture()
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture(params=["file", "sql"])
def store(request, tmp_path):
    """
    Every store-backed test runs twice: once on the JSON file store and once
    on the SQL store over an in-memory SQLite database.
    """
    if request.param == "file":
        s = JsonFileRecordStore(tmp_path / "db.json")
    else:
        s = SqlRecordStore("sqlite://")
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(settings, store):
    return TestClient(create_app(settings, store=store))
