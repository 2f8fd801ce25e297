def _notify(client, headers, title="Hearing tomorrow", **extra):
    payload = {"title": title, "message": "Bring the bundle", "type": "case", **extra}
    response = client.post("/api/notifications", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_notifications_are_scoped_to_recipient(client, lawyer, other_lawyer_headers):
    user, headers = lawyer
    created = _notify(client, headers)
    assert created["recipient_id"] == user["id"]
    assert created["recipient_kind"] == "User"
    assert created["is_read"] is False

    page = client.get("/api/notifications", headers=headers).json()["data"]
    assert page["total"] == 1
    assert page["unread_count"] == 1

    page = client.get("/api/notifications", headers=other_lawyer_headers).json()["data"]
    assert page["total"] == 0

    response = client.patch(f"/api/notifications/{created['id']}/read", headers=other_lawyer_headers)
    assert response.status_code == 404


def test_reference_round_trips(client, lawyer_headers):
    created = _notify(client, lawyer_headers, reference={"kind": "Task", "id": "task-1"})
    assert created["reference"] == {"kind": "Task", "id": "task-1"}

    response = client.post("/api/notifications", json={
        "title": "x", "message": "y", "type": "case", "reference": {"kind": "Invoice", "id": "1"}
    }, headers=lawyer_headers)
    assert response.status_code == 422


def test_mark_read_read_all_and_clear(client, lawyer_headers):
    first = _notify(client, lawyer_headers, title="One")
    _notify(client, lawyer_headers, title="Two")
    _notify(client, lawyer_headers, title="Three")

    response = client.patch(f"/api/notifications/{first['id']}/read", headers=lawyer_headers)
    assert response.json()["data"]["is_read"] is True

    response = client.patch("/api/notifications/read-all", headers=lawyer_headers)
    assert response.json()["data"] == {"modified_count": 2}

    response = client.delete("/api/notifications/clear/read", headers=lawyer_headers)
    assert response.json()["data"] == {"deleted_count": 3}

    page = client.get("/api/notifications", headers=lawyer_headers).json()["data"]
    assert (page["total"], page["unread_count"]) == (0, 0)


def test_delete_single(client, lawyer_headers):
    created = _notify(client, lawyer_headers)
    response = client.delete(f"/api/notifications/{created['id']}", headers=lawyer_headers)
    assert response.json()["message"] == "Notification deleted successfully"
    response = client.delete(f"/api/notifications/{created['id']}", headers=lawyer_headers)
    assert response.status_code == 404


def test_client_creation_sends_welcome_notification(client, register, lawyer_headers):
    response = client.post("/api/clients", json={
        "name": "Carol Client",
        "email": "client@example.com",
        "mobile": "0711",
        "notification_settings": {
            "enable_email_notifications": True,
            "enable_sms_notifications": True,
            "email_template": "Dear {clientName}, {lawyerName} at {lawFirm} will contact you.",
            "sms_template": "Hi {clientName}",
        },
    }, headers=lawyer_headers)
    assert response.status_code == 201, response.text
    client_id = response.json()["data"]["id"]

    # Registering with the same email links the account to the existing record
    user, headers = register("client@example.com", role="client", name="Carol Client")
    assert user["client_id"] == client_id

    page = client.get("/api/notifications", headers=headers).json()["data"]
    assert page["unread_count"] == 1
    welcome = page["notifications"][0]
    assert welcome["recipient_id"] == client_id
    assert welcome["recipient_kind"] == "Client"
    assert welcome["title"] == "Welcome to Legal CMS"
    assert "Alice Lawyer" in welcome["message"]
