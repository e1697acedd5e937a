import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import read_body, validate_body
from app.core.errors import EmailConflictError, EmployeeNotFoundError
from app.schemas.employee import (
    EmployeeCreate,
    EmployeeEnvelope,
    EmployeeListEnvelope,
    EmployeeOut,
    EmployeePatch,
)
from app.store import RecordStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=EmployeeListEnvelope)
def list_employees(store: RecordStore = Depends(get_store)):
    """
    List every employee for the dashboard. Credentials are never included.
    """
    return EmployeeListEnvelope(employees=[EmployeeOut.from_record(e) for e in store.get_employees()])


@router.post("", response_model=EmployeeEnvelope, status_code=status.HTTP_201_CREATED)
def create_employee(
    body: dict[str, Any] = Depends(read_body),
    store: RecordStore = Depends(get_store),
):
    """
    Admin create path. The employee gets no password and can only log in through
    an external identity provider until one is set.
    """
    payload = validate_body(EmployeeCreate, body)
    try:
        employee = store.create_employee(
            name=payload.name,
            email=payload.email,
            emp_id=payload.emp_id,
            role=payload.role,
        )
    except EmailConflictError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    return EmployeeEnvelope(employee=EmployeeOut.from_record(employee))


@router.patch("/{employee_id}", response_model=EmployeeEnvelope)
def update_employee(
    employee_id: str,
    body: dict[str, Any] = Depends(read_body),
    store: RecordStore = Depends(get_store),
):
    """
    Partial update by `_id` or `empId` (clock in/out, status changes).

    Setting status to "leak" also raises an alert at `location` (default "unknown").
    """
    payload = validate_body(EmployeePatch, body)
    try:
        employee = store.update_employee(employee_id, payload.to_patch(), location=payload.location)
    except EmployeeNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return EmployeeEnvelope(employee=EmployeeOut.from_record(employee))
