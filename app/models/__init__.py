from app.models.alert import Alert
from app.models.employee import Employee

__all__ = ["Alert", "Employee"]
