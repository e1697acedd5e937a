from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from app.schemas.alert import AlertRecord
from app.schemas.employee import EmployeeRecord

LEAK_STATUS = "leak"
DEFAULT_ALERT_TYPE = "leak"
DEFAULT_LOCATION = "unknown"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes are taken to be UTC (SQLite drops the offset)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def new_id(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4().hex}"


def employee_matches(record: EmployeeRecord, identifier: str) -> bool:
    return record.id == identifier or record.emp_id == identifier


def triggers_leak_alert(merged_status: str | None, patch: dict[str, Any]) -> bool:
    return "status" in patch and merged_status == LEAK_STATUS


def build_alert(
    employee_id: str,
    type: str | None = None,
    status: str | None = None,
    location: str | None = None,
) -> AlertRecord:
    return AlertRecord(
        id=new_id("a_"),
        employee_id=employee_id,
        type=type or DEFAULT_ALERT_TYPE,
        status=status,
        location=location or DEFAULT_LOCATION,
        created_at=utcnow(),
    )


def build_employee(
    *,
    name: str,
    email: str,
    emp_id: str,
    role: str,
    password_hash: str | None = None,
) -> EmployeeRecord:
    return EmployeeRecord(
        id=new_id("u_"),
        name=name,
        email=email,
        role=role,
        emp_id=emp_id,
        password_hash=password_hash,
        created_at=utcnow(),
    )


@runtime_checkable
class RecordStore(Protocol):
    """Persistence for the `employees` and `alerts` collections."""

    backend: str

    def create_employee(
        self,
        *,
        name: str,
        email: str,
        emp_id: str,
        role: str,
        password_hash: str | None = None,
    ) -> EmployeeRecord: ...

    def get_employees(self) -> list[EmployeeRecord]: ...

    def get_employee(self, identifier: str) -> EmployeeRecord | None: ...

    def find_employee_by_email(self, email: str) -> EmployeeRecord | None: ...

    def update_employee(self, identifier: str, patch: dict[str, Any], location: str | None = None) -> EmployeeRecord: ...

    def record_login(self, identifier: str) -> EmployeeRecord: ...

    def record_logout(self, identifier: str) -> EmployeeRecord: ...

    def create_alert(
        self,
        *,
        employee_id: str,
        type: str | None = None,
        status: str | None = None,
        location: str | None = None,
    ) -> AlertRecord: ...

    def get_alerts(self, since: datetime | None = None) -> list[AlertRecord]: ...

    def ping(self) -> bool: ...

    def close(self) -> None: ...
