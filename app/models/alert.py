from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    # Advisory reference only; employees are never deleted, so no FK is declared
    employee_id: Mapped[str] = mapped_column(String(40), index=True, nullable=False)

    type: Mapped[str] = mapped_column(String(100), nullable=False, default="leak")
    status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    location: Mapped[str] = mapped_column(String(200), nullable=False, default="unknown")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
