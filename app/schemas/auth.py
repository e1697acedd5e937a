from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from app.schemas.employee import EmployeeRecord


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1)
    emp_id: str = Field(min_length=1, max_length=50, alias="empId")
    role: str = Field(default="employee", min_length=1, max_length=50)


class ExternalRegisterRequest(BaseModel):
    """Registration when an external identity provider owns the credential."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=320)
    emp_id: str = Field(min_length=1, max_length=50, alias="empId")
    role: str = Field(default="employee", min_length=1, max_length=50)


class LoginRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ExternalLoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str | None = Field(default=None, alias="userId")
    email: str | None = None


class LogoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str | None = Field(default=None, alias="userId")


class UserSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    role: str
    emp_id: str = Field(alias="empId")
    last_login: datetime | None = Field(default=None, alias="lastLogin")

    @classmethod
    def from_record(cls, record: EmployeeRecord) -> "UserSummary":
        return cls(
            id=record.id,
            name=record.name,
            email=record.email,
            role=record.role,
            emp_id=record.emp_id,
            last_login=record.last_login,
        )


class UserEnvelope(BaseModel):
    success: bool = True
    user: UserSummary


class AckEnvelope(BaseModel):
    success: bool = True
