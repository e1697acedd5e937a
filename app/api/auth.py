import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.deps import get_settings, read_body, validate_body
from app.core.config import Settings
from app.core.errors import EmailConflictError, EmployeeNotFoundError, StoreUnavailableError
from app.core.rate_limit import auth_rate_limit
from app.core.security import hash_password, verify_password
from app.schemas.auth import (
    AckEnvelope,
    ExternalLoginRequest,
    ExternalRegisterRequest,
    LoginRequest,
    LogoutRequest,
    RegisterRequest,
    UserEnvelope,
    UserSummary,
)
from app.store import RecordStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials"


@router.post(
    "/register",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
def register(
    body: dict[str, Any] = Depends(read_body),
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Register an employee.

    In external auth mode the identity provider owns the password, so none is taken here.
    """
    if settings.external_auth:
        payload = validate_body(ExternalRegisterRequest, body)
        password_hash = None
    else:
        payload = validate_body(RegisterRequest, body)
        password_hash = hash_password(payload.password)

    try:
        employee = store.create_employee(
            name=payload.name,
            email=payload.email,
            emp_id=payload.emp_id,
            role=payload.role,
            password_hash=password_hash,
        )
    except EmailConflictError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    logger.info("Registered employee %s (%s)", employee.id, employee.emp_id)
    return UserEnvelope(user=UserSummary.from_record(employee))


@router.post("/login", response_model=UserEnvelope, dependencies=[Depends(auth_rate_limit)])
def login(
    body: dict[str, Any] = Depends(read_body),
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    if settings.external_auth:
        payload = validate_body(ExternalLoginRequest, body)
        if not payload.user_id and not payload.email:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="userId or email required")
        if payload.user_id:
            employee = store.get_employee(payload.user_id)
        else:
            employee = store.find_employee_by_email(payload.email)
        if not employee:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CREDENTIALS)
    else:
        payload = validate_body(LoginRequest, body)
        employee = store.find_employee_by_email(payload.email)
        # same message for unknown email and wrong password
        if not employee or not verify_password(payload.password, employee.password_hash):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CREDENTIALS)

    try:
        employee = store.record_login(employee.id)
    except EmployeeNotFoundError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CREDENTIALS)

    return UserEnvelope(user=UserSummary.from_record(employee))


@router.post("/logout", response_model=AckEnvelope)
def logout(request: Request, body: dict[str, Any] = Depends(read_body)):
    """Acknowledges the logout; stamps lastLogout when a known userId is given."""
    payload = validate_body(LogoutRequest, body)
    if payload.user_id:
        try:
            get_store(request).record_logout(payload.user_id)
        except EmployeeNotFoundError:
            logger.info("Logout for unknown employee %s", payload.user_id)
        except StoreUnavailableError as exc:
            logger.warning("Logout for %s not recorded: %s", payload.user_id, exc)
    return AckEnvelope()
