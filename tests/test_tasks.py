import pytest


@pytest.fixture
def task(client, lawyer_headers):
    response = client.post("/api/tasks", json={
        "title": "Draft plaint",
        "due_date": "2030-02-01T12:00:00Z",
        "priority": "High",
        "related_to": {"name": "Acme v Widgets", "case_number": "CL-001"},
    }, headers=lawyer_headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_task_defaults(task, lawyer):
    user, _ = lawyer
    assert task["status"] == "Pending"
    assert task["completed"] is False
    assert task["user_id"] == user["id"]
    assert task["related_to"] == {"name": "Acme v Widgets", "case_number": "CL-001"}


@pytest.mark.parametrize("payload, message", [
    ({"due_date": "2030-02-01T00:00:00"}, "Title is required"),
    ({"title": "Call client"}, "Due date is required"),
    ({"title": "Call client", "due_date": "someday"}, "Due date is in invalid format"),
])
def test_create_task_validation(client, lawyer_headers, payload, message):
    response = client.post("/api/tasks", json=payload, headers=lawyer_headers)
    assert response.status_code == 400
    assert response.json()["message"] == message


def test_related_to_defaults_to_empty_strings(client, lawyer_headers):
    response = client.post("/api/tasks", json={"title": "File", "due_date": "2030-02-01T00:00:00"},
                           headers=lawyer_headers)
    assert response.json()["data"]["related_to"] == {"name": "", "case_number": ""}


def test_toggle_flips_completion_and_status(client, lawyer_headers, task):
    response = client.patch(f"/api/tasks/{task['id']}/toggle", headers=lawyer_headers)
    toggled = response.json()["data"]
    assert toggled["completed"] is True
    assert toggled["status"] == "Completed"

    response = client.patch(f"/api/tasks/{task['id']}/toggle", headers=lawyer_headers)
    toggled = response.json()["data"]
    assert toggled["completed"] is False
    assert toggled["status"] == "In Progress"


def test_tasks_are_private_to_their_owner(client, lawyer_headers, other_lawyer_headers, task):
    assert client.get("/api/tasks", headers=other_lawyer_headers).json()["data"] == []

    response = client.put(f"/api/tasks/{task['id']}", json={"title": "Hijacked"}, headers=other_lawyer_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to update this task"

    response = client.delete(f"/api/tasks/{task['id']}", headers=other_lawyer_headers)
    assert response.status_code == 403

    response = client.patch(f"/api/tasks/{task['id']}/toggle", headers=other_lawyer_headers)
    assert response.status_code == 403

    response = client.get(f"/api/tasks/{task['id']}", headers=lawyer_headers)
    unchanged = response.json()["data"]
    assert unchanged["title"] == "Draft plaint"
    assert unchanged["completed"] is False


def test_update_and_delete(client, lawyer_headers, task):
    response = client.put(f"/api/tasks/{task['id']}", json={"status": "In Progress"}, headers=lawyer_headers)
    assert response.json()["data"]["status"] == "In Progress"

    response = client.delete(f"/api/tasks/{task['id']}", headers=lawyer_headers)
    assert response.status_code == 200

    response = client.get(f"/api/tasks/{task['id']}", headers=lawyer_headers)
    assert response.status_code == 404


def test_update_rejects_null_due_date(client, lawyer_headers, task):
    response = client.put(f"/api/tasks/{task['id']}", json={"due_date": None}, headers=lawyer_headers)
    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation Error"
    assert "due_date" in body["errors"]

    response = client.get(f"/api/tasks/{task['id']}", headers=lawyer_headers)
    assert response.json()["data"]["due_date"] == task["due_date"]
