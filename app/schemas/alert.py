from datetime import datetime
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AlertRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    employee_id: str = Field(alias="employeeId")
    type: str = "leak"
    status: str | None = None
    location: str = "unknown"
    created_at: datetime = Field(alias="timestamp")
    resolved_at: datetime | None = Field(default=None, alias="resolvedAt")


class AlertCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    employee_id: str = Field(
        min_length=1,
        max_length=40,
        validation_alias=AliasChoices("employeeId", "userId", "employee_id"),
    )
    type: str | None = Field(default=None, max_length=100)
    status: str | None = Field(default=None, max_length=100)
    location: str | None = Field(default=None, max_length=200)


class AlertEnvelope(BaseModel):
    success: bool = True
    alert: AlertRecord


class AlertListEnvelope(BaseModel):
    success: bool = True
    alerts: list[AlertRecord]
