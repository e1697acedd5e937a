import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import read_body, validate_body
from app.schemas.alert import AlertCreate, AlertEnvelope, AlertListEnvelope
from app.store import RecordStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["alerts"])


def parse_since(raw: str | None) -> datetime | None:
    """ISO-8601 timestamp or date; anything unparseable means no filter."""
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        logger.debug("Ignoring unparseable since=%r", raw)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # offset pushes it past datetime.max/min
        logger.debug("Ignoring out-of-range since=%r", raw)
        return None


@router.get("", response_model=AlertListEnvelope)
def list_alerts(
    since: str | None = Query(default=None, description="Only alerts raised at or after this ISO-8601 timestamp"),
    store: RecordStore = Depends(get_store),
):
    return AlertListEnvelope(alerts=store.get_alerts(since=parse_since(since)))


@router.post("", response_model=AlertEnvelope, status_code=status.HTTP_201_CREATED)
def create_alert(
    body: dict[str, Any] = Depends(read_body),
    store: RecordStore = Depends(get_store),
):
    payload = validate_body(AlertCreate, body)
    alert = store.create_alert(
        employee_id=payload.employee_id,
        type=payload.type,
        status=payload.status,
        location=payload.location,
    )
    logger.warning("Alert %s (%s) raised for employee %s at %s", alert.id, alert.type, alert.employee_id, alert.location)
    return AlertEnvelope(alert=alert)
