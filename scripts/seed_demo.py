"""
Seed the configured record store with demo employees and one alert.

    python -m scripts.seed_demo

Uses the same settings as the server (STORE_BACKEND, DATA_FILE, DATABASE_URL).
"""
from app.core.config import settings
from app.core.errors import EmailConflictError
from app.core.security import hash_password
from app.store import build_store

DEMO_PASSWORD = "demo1234"

DEMO_EMPLOYEES = [
    ("Dana Driver", "dana@depot.test", "E100", "truck-driver"),
    ("Ravi Depot", "ravi@depot.test", "E200", "depot-employee"),
    ("Ola Office", "ola@depot.test", "E300", "employee"),
]


def upsert_employee(store, name: str, email: str, emp_id: str, role: str):
    existing = store.find_employee_by_email(email)
    if existing:
        return existing
    try:
        return store.create_employee(
            name=name,
            email=email,
            emp_id=emp_id,
            role=role,
            password_hash=hash_password(DEMO_PASSWORD),
        )
    except EmailConflictError:
        return store.find_employee_by_email(email)


def main():
    store = build_store(settings)
    try:
        employees = [upsert_employee(store, *row) for row in DEMO_EMPLOYEES]

        # one leak so the dashboard has something to show
        store.update_employee(employees[0].emp_id, {"status": "leak"}, location="Depot bay 3")

        print(f"Seeded employees ({store.backend} store, password '{DEMO_PASSWORD}'):")
        for e in employees:
            print(e.emp_id, e.name, e.email, e.role, e.id)
        print(f"Alerts: {len(store.get_alerts())}")
    finally:
        store.close()

if __name__ == "__main__":
    main()
