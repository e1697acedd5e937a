from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError

from app.core.errors import (
    EmailConflictError,
    EmployeeNotFoundError,
    StoreCorruptedError,
    StoreUnavailableError,
)
from app.schemas.alert import AlertRecord
from app.schemas.employee import EmployeeRecord
from app.store.base import (
    LEAK_STATUS,
    as_utc,
    build_alert,
    build_employee,
    employee_matches,
    triggers_leak_alert,
    utcnow,
)

logger = logging.getLogger(__name__)


def _empty_document() -> dict[str, list]:
    return {"employees": [], "alerts": []}


class JsonFileRecordStore:
    """
    Both collections live in one JSON document that is rewritten on every mutation.

    Read-modify-write cycles hold `_lock`, and each write goes to a temp file in the
    same directory followed by os.replace, so readers never observe a half-written file.
    The lock is per-process: two server processes sharing one file can still race.
    """

    backend = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._ensure_file()
        # fail at startup rather than on the first request
        self._read()

    # ---- file plumbing ----

    def _ensure_file(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self._write(_empty_document())
                logger.info("Initialized empty record file at %s", self.path)
        except OSError as exc:
            raise StoreUnavailableError(f"cannot initialize {self.path}: {exc}") from exc

    def _read(self) -> dict[str, list]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreUnavailableError(f"cannot read {self.path}: {exc}") from exc

        try:
            doc = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as exc:
            raise StoreCorruptedError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(doc, dict):
            raise StoreCorruptedError(f"{self.path} must hold a JSON object")

        for key in ("employees", "alerts"):
            doc.setdefault(key, [])
            if not isinstance(doc[key], list):
                raise StoreCorruptedError(f"{self.path}: '{key}' must be a list")
        return doc

    def _write(self, doc: dict[str, list]) -> None:
        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StoreUnavailableError(f"cannot write {self.path}: {exc}") from exc

    @contextmanager
    def _transaction(self) -> Iterator[dict[str, list]]:
        """Yields the parsed document; it is written back only if the block completes."""
        with self._lock:
            doc = self._read()
            yield doc
            self._write(doc)

    @staticmethod
    def _employee(raw: dict[str, Any]) -> EmployeeRecord:
        try:
            return EmployeeRecord.model_validate(raw)
        except ValidationError as exc:
            raise StoreCorruptedError(f"malformed employee entry: {exc}") from exc

    @staticmethod
    def _alert(raw: dict[str, Any]) -> AlertRecord:
        try:
            return AlertRecord.model_validate(raw)
        except ValidationError as exc:
            raise StoreCorruptedError(f"malformed alert entry: {exc}") from exc

    @staticmethod
    def _dump(record: EmployeeRecord | AlertRecord) -> dict[str, Any]:
        return record.model_dump(mode="json", by_alias=True)

    def _find_index(self, doc: dict[str, list], identifier: str) -> int:
        for idx, raw in enumerate(doc["employees"]):
            if employee_matches(self._employee(raw), identifier):
                return idx
        raise EmployeeNotFoundError(identifier)

    # ---- employees ----

    def create_employee(
        self,
        *,
        name: str,
        email: str,
        emp_id: str,
        role: str,
        password_hash: str | None = None,
    ) -> EmployeeRecord:
        with self._transaction() as doc:
            wanted = email.lower()
            if any(str(raw.get("email", "")).lower() == wanted for raw in doc["employees"]):
                raise EmailConflictError(email)
            record = build_employee(name=name, email=email, emp_id=emp_id, role=role, password_hash=password_hash)
            doc["employees"].append(self._dump(record))
        return record

    def get_employees(self) -> list[EmployeeRecord]:
        with self._lock:
            doc = self._read()
        return [self._employee(raw) for raw in doc["employees"]]

    def get_employee(self, identifier: str) -> EmployeeRecord | None:
        for record in self.get_employees():
            if employee_matches(record, identifier):
                return record
        return None

    def find_employee_by_email(self, email: str) -> EmployeeRecord | None:
        wanted = email.lower()
        for record in self.get_employees():
            if record.email.lower() == wanted:
                return record
        return None

    def update_employee(self, identifier: str, patch: dict[str, Any], location: str | None = None) -> EmployeeRecord:
        with self._transaction() as doc:
            idx = self._find_index(doc, identifier)
            current = self._employee(doc["employees"][idx])
            updated = current.model_copy(update={**patch, "updated_at": utcnow()})
            doc["employees"][idx] = self._dump(updated)

            if triggers_leak_alert(updated.status, patch):
                alert = build_alert(updated.id, status=LEAK_STATUS, location=location)
                doc["alerts"].append(self._dump(alert))
                logger.warning("Leak reported by employee %s at %s (alert %s)", updated.id, alert.location, alert.id)
        return updated

    def _stamp(self, identifier: str, field: str) -> EmployeeRecord:
        with self._transaction() as doc:
            idx = self._find_index(doc, identifier)
            updated = self._employee(doc["employees"][idx]).model_copy(update={field: utcnow()})
            doc["employees"][idx] = self._dump(updated)
        return updated

    def record_login(self, identifier: str) -> EmployeeRecord:
        return self._stamp(identifier, "last_login")

    def record_logout(self, identifier: str) -> EmployeeRecord:
        return self._stamp(identifier, "last_logout")

    # ---- alerts ----

    def create_alert(
        self,
        *,
        employee_id: str,
        type: str | None = None,
        status: str | None = None,
        location: str | None = None,
    ) -> AlertRecord:
        alert = build_alert(employee_id, type=type, status=status, location=location)
        with self._transaction() as doc:
            doc["alerts"].append(self._dump(alert))
        return alert

    def get_alerts(self, since: datetime | None = None) -> list[AlertRecord]:
        with self._lock:
            doc = self._read()
        alerts = [self._alert(raw) for raw in doc["alerts"]]
        if since is not None:
            cutoff = as_utc(since)
            alerts = [a for a in alerts if as_utc(a.created_at) >= cutoff]
        return alerts

    # ---- lifecycle ----

    def ping(self) -> bool:
        return os.access(self.path, os.R_OK | os.W_OK)

    def close(self) -> None:
        pass
