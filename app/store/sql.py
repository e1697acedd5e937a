from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

from sqlalchemy import or_, text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.errors import EmailConflictError, EmployeeNotFoundError, StoreUnavailableError
from app.db.base import Base
from app.db.session import make_engine, make_session_factory
from app.models.alert import Alert
from app.models.employee import Employee
from app.schemas.alert import AlertRecord
from app.schemas.employee import EmployeeRecord
from app.store.base import LEAK_STATUS, as_utc, build_alert, build_employee, triggers_leak_alert, utcnow

logger = logging.getLogger(__name__)

_EMPLOYEE_TIMESTAMPS = ("clock_in", "clock_out", "last_login", "last_logout", "created_at", "updated_at")


def employee_to_record(e: Employee) -> EmployeeRecord:
    return EmployeeRecord(
        id=e.id,
        name=e.name,
        email=e.email,
        role=e.role,
        emp_id=e.emp_id,
        password_hash=e.password_hash,
        status=e.status,
        alarm_triggered=e.alarm_triggered,
        **{field: as_utc(getattr(e, field)) for field in _EMPLOYEE_TIMESTAMPS},
    )


def alert_to_record(a: Alert) -> AlertRecord:
    return AlertRecord(
        id=a.id,
        employee_id=a.employee_id,
        type=a.type,
        status=a.status,
        location=a.location,
        created_at=as_utc(a.created_at),
        resolved_at=as_utc(a.resolved_at),
    )


class SqlRecordStore:
    """Record store on a SQLAlchemy database; tables are created on open."""

    backend = "sql"

    def __init__(self, database_url: str):
        self.engine = make_engine(database_url)
        self.SessionLocal = make_session_factory(self.engine)
        try:
            Base.metadata.create_all(bind=self.engine)
        except OperationalError as exc:
            self.engine.dispose()
            raise StoreUnavailableError(f"cannot open database: {exc}") from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except OperationalError as exc:
            db.rollback()
            raise StoreUnavailableError(str(exc)) from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _lookup(db: Session, identifier: str) -> Employee:
        employee = (
            db.query(Employee)
            .filter(or_(Employee.id == identifier, Employee.emp_id == identifier))
            .order_by(Employee.created_at.asc())
            .first()
        )
        if not employee:
            raise EmployeeNotFoundError(identifier)
        return employee

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
        record = build_employee(name=name, email=email, emp_id=emp_id, role=role, password_hash=password_hash)
        try:
            with self._session() as db:
                if db.query(Employee.id).filter(Employee.email_key == email.lower()).first():
                    raise EmailConflictError(email)
                db.add(
                    Employee(
                        **record.model_dump(),
                        email_key=email.lower(),
                    )
                )
        except IntegrityError as exc:
            # race: another request inserted the same email first
            raise EmailConflictError(email) from exc
        return record

    def get_employees(self) -> list[EmployeeRecord]:
        with self._session() as db:
            rows = db.query(Employee).order_by(Employee.created_at.asc()).all()
            return [employee_to_record(e) for e in rows]

    def get_employee(self, identifier: str) -> EmployeeRecord | None:
        try:
            with self._session() as db:
                return employee_to_record(self._lookup(db, identifier))
        except EmployeeNotFoundError:
            return None

    def find_employee_by_email(self, email: str) -> EmployeeRecord | None:
        with self._session() as db:
            e = db.query(Employee).filter(Employee.email_key == email.lower()).one_or_none()
            return employee_to_record(e) if e else None

    def update_employee(self, identifier: str, patch: dict[str, Any], location: str | None = None) -> EmployeeRecord:
        with self._session() as db:
            employee = self._lookup(db, identifier)
            for field, value in patch.items():
                setattr(employee, field, value)
            employee.updated_at = utcnow()

            if triggers_leak_alert(employee.status, patch):
                alert = build_alert(employee.id, status=LEAK_STATUS, location=location)
                db.add(Alert(**alert.model_dump()))
                logger.warning("Leak reported by employee %s at %s (alert %s)", employee.id, alert.location, alert.id)

            db.flush()
            return employee_to_record(employee)

    def _stamp(self, identifier: str, field: str) -> EmployeeRecord:
        with self._session() as db:
            employee = self._lookup(db, identifier)
            setattr(employee, field, utcnow())
            db.flush()
            return employee_to_record(employee)

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
        with self._session() as db:
            db.add(Alert(**alert.model_dump()))
        return alert

    def get_alerts(self, since: datetime | None = None) -> list[AlertRecord]:
        with self._session() as db:
            query = db.query(Alert)
            if since is not None:
                query = query.filter(Alert.created_at >= as_utc(since))
            rows = query.order_by(Alert.created_at.desc()).all()
            return [alert_to_record(a) for a in rows]

    # ---- lifecycle ----

    def ping(self) -> bool:
        try:
            with self._session() as db:
                db.execute(text("SELECT 1"))
        except StoreUnavailableError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
