import json
import logging
from pathlib import Path

from fastapi import Request

from app.core.config import Settings
from app.core.errors import StoreUnavailableError
from app.store.base import RecordStore
from app.store.file import JsonFileRecordStore
from app.store.sql import SqlRecordStore

logger = logging.getLogger(__name__)

__all__ = ["RecordStore", "JsonFileRecordStore", "SqlRecordStore", "build_store", "get_store"]


def _database_url(settings: Settings) -> str:
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    if settings.STORE_CREDENTIALS_PATH:
        path = Path(settings.STORE_CREDENTIALS_PATH)
        try:
            creds = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreUnavailableError(f"cannot read store credentials at {path}: {exc}") from exc
        url = creds.get("database_url") if isinstance(creds, dict) else None
        if url:
            return url
        raise StoreUnavailableError(f"store credentials at {path} have no 'database_url'")
    raise StoreUnavailableError("sql store selected but neither DATABASE_URL nor STORE_CREDENTIALS_PATH is set")


def build_store(settings: Settings) -> RecordStore:
    """
    Opens the backend named by settings.
    Raises StoreUnavailableError when the SQL backend cannot be reached and
    StoreCorruptedError when the data file does not parse.
    """
    backend = settings.resolved_backend()
    if backend == "sql":
        store = SqlRecordStore(_database_url(settings))
        logger.info("Using SQL record store (%s)", store.engine.url.render_as_string(hide_password=True))
        return store
    if backend == "file":
        store = JsonFileRecordStore(settings.DATA_FILE)
        logger.info("Using file record store at %s", store.path)
        return store
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND!r}")


def get_store(request: Request) -> RecordStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreUnavailableError("record store not initialized")
    return store
