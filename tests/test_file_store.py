import json
import threading

import pytest

from app.core.errors import EmailConflictError, EmployeeNotFoundError, StoreCorruptedError
from app.store.file import JsonFileRecordStore


def test_creates_empty_document(tmp_path):
    path = tmp_path / "nested" / "db.json"
    JsonFileRecordStore(path)
    assert json.loads(path.read_text()) == {"employees": [], "alerts": []}


def test_existing_document_is_kept(tmp_path):
    path = tmp_path / "db.json"
    path.write_text(json.dumps({
        "employees": [{
            "_id": "u_legacy", "name": "Old", "email": "old@depot.test", "role": "employee",
            "empId": "E1", "createdAt": "2025-01-01T00:00:00.000Z", "lastLogin": None,
            "lastLogout": None, "clockIn": None, "clockOut": None, "status": "safe",
            "alarmTriggered": False,
        }],
        "alerts": [],
    }))
    store = JsonFileRecordStore(path)
    employees = store.get_employees()
    assert [e.id for e in employees] == ["u_legacy"]
    assert employees[0].password_hash is None


def test_missing_collections_are_filled_in(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("{}")
    store = JsonFileRecordStore(path)
    assert store.get_alerts() == []


def test_malformed_file_is_fatal(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("{ this is not json")
    with pytest.raises(StoreCorruptedError):
        JsonFileRecordStore(path)


def test_wrong_shape_is_fatal(tmp_path):
    path = tmp_path / "db.json"
    path.write_text(json.dumps({"employees": {}, "alerts": []}))
    with pytest.raises(StoreCorruptedError):
        JsonFileRecordStore(path)


def test_persisted_layout_uses_wire_names(tmp_path):
    path = tmp_path / "db.json"
    store = JsonFileRecordStore(path)
    emp = store.create_employee(name="A", email="a@x.com", emp_id="E1", role="employee", password_hash="h")
    store.update_employee(emp.id, {"status": "leak"})

    doc = json.loads(path.read_text())
    saved = doc["employees"][0]
    assert saved["_id"] == emp.id
    assert saved["empId"] == "E1"
    assert saved["passwordHash"] == "h"
    assert saved["status"] == "leak"
    assert doc["alerts"][0]["employeeId"] == emp.id
    assert "timestamp" in doc["alerts"][0]


def test_writes_leave_no_temp_files(tmp_path):
    store = JsonFileRecordStore(tmp_path / "db.json")
    for i in range(3):
        store.create_alert(employee_id=f"u_{i}")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["db.json"]


def test_failed_mutation_does_not_write(tmp_path):
    path = tmp_path / "db.json"
    store = JsonFileRecordStore(path)
    store.create_employee(name="A", email="a@x.com", emp_id="E1", role="employee")
    before = path.read_text()
    with pytest.raises(EmailConflictError):
        store.create_employee(name="B", email="A@X.com", emp_id="E2", role="employee")
    with pytest.raises(EmployeeNotFoundError):
        store.update_employee("u_missing", {"status": "leak"})
    assert path.read_text() == before


def test_concurrent_creates_are_all_persisted(tmp_path):
    store = JsonFileRecordStore(tmp_path / "db.json")

    def worker(i):
        store.create_employee(name=f"W{i}", email=f"w{i}@depot.test", emp_id=f"E{i}", role="employee")

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    reopened = JsonFileRecordStore(tmp_path / "db.json")
    assert len(reopened.get_employees()) == 20


def test_concurrent_duplicate_email_only_one_wins(tmp_path):
    store = JsonFileRecordStore(tmp_path / "db.json")
    outcomes = []

    def worker(i):
        try:
            store.create_employee(name=f"W{i}", email="same@depot.test", emp_id=f"E{i}", role="employee")
            outcomes.append("ok")
        except EmailConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 9
