from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class EmployeeRecord(BaseModel):
    """Stored employee, credential included. Never returned as-is by the API."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    role: str = "employee"
    emp_id: str = Field(alias="empId")
    password_hash: str | None = Field(default=None, alias="passwordHash")
    status: str = "safe"
    alarm_triggered: bool = Field(default=False, alias="alarmTriggered")
    clock_in: datetime | None = Field(default=None, alias="clockIn")
    clock_out: datetime | None = Field(default=None, alias="clockOut")
    last_login: datetime | None = Field(default=None, alias="lastLogin")
    last_logout: datetime | None = Field(default=None, alias="lastLogout")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class EmployeeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    role: str
    emp_id: str = Field(alias="empId")
    status: str
    alarm_triggered: bool = Field(alias="alarmTriggered")
    clock_in: datetime | None = Field(alias="clockIn")
    clock_out: datetime | None = Field(alias="clockOut")
    last_login: datetime | None = Field(alias="lastLogin")
    last_logout: datetime | None = Field(alias="lastLogout")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime | None = Field(alias="updatedAt")

    @classmethod
    def from_record(cls, record: EmployeeRecord) -> "EmployeeOut":
        return cls.model_validate(record.model_dump(exclude={"password_hash"}))


class EmployeeCreate(BaseModel):
    """Admin create path: no credential."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=320)
    emp_id: str = Field(min_length=1, max_length=50, alias="empId")
    role: str = Field(default="employee", min_length=1, max_length=50)


NULLABLE_PATCH_FIELDS = {"clock_in", "clock_out", "last_logout"}


class EmployeePatch(BaseModel):
    """Partial update. Unknown keys (and immutable ones like _id, email) are dropped."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    role: str | None = Field(default=None, min_length=1, max_length=50)
    status: str | None = Field(default=None, min_length=1, max_length=50)
    alarm_triggered: bool | None = Field(default=None, alias="alarmTriggered")
    clock_in: datetime | None = Field(default=None, alias="clockIn")
    clock_out: datetime | None = Field(default=None, alias="clockOut")
    last_logout: datetime | None = Field(default=None, alias="lastLogout")

    # only used to place a leak-triggered alert; not stored on the employee
    location: str | None = None

    def to_patch(self) -> dict:
        """Fields the client actually sent; timestamps may be cleared with null, the rest may not."""
        sent = self.model_dump(exclude_unset=True, exclude={"location"})
        return {k: v for k, v in sent.items() if v is not None or k in NULLABLE_PATCH_FIELDS}


class EmployeeEnvelope(BaseModel):
    success: bool = True
    employee: EmployeeOut


class EmployeeListEnvelope(BaseModel):
    success: bool = True
    employees: list[EmployeeOut]
