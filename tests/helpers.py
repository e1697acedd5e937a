from app.core.config import Settings
from app.core.security import hash_password
from app.schemas.employee import EmployeeRecord


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "STORE_BACKEND": "file",
        "DATABASE_URL": None,
        "STORE_CREDENTIALS_PATH": None,
        "DATA_FILE": str(tmp_path / "db.json"),
        "FRONTEND_URL": "http://127.0.0.1:5500",
        "AUTH_MODE": "local",
        "RATE_LIMIT_MAX": 1000,
        "RATE_LIMIT_WINDOW_SECONDS": 60,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def register(client, name="Alice", email="alice@depot.test", password="secret", emp_id="E100", role="truck-driver", **extra):
    body = {"name": name, "email": email, "password": password, "empId": emp_id, "role": role, **extra}
    return client.post("/register", json=body)


def login(client, email="alice@depot.test", password="secret"):
    return client.post("/login", json={"email": email, "password": password})


def create_employee(store, emp_id: str, name: str, email: str | None = None, password: str | None = None, role="employee") -> EmployeeRecord:
    return store.create_employee(
        name=name,
        email=email or f"{emp_id.lower()}@depot.test",
        emp_id=emp_id,
        role=role,
        password_hash=hash_password(password) if password else None,
    )
