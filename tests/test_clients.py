import uuid


def test_create_and_fetch_client(client, lawyer, make_client):
    user, headers = lawyer
    created = make_client(mobile="0722", company="Acme")
    assert created["status"] is True
    assert created["creator"]["id"] == user["id"]
    assert created["cases"] == []

    response = client.get(f"/api/clients/{created['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["company"] == "Acme"


def test_duplicate_email_conflicts(client, lawyer_headers, make_client):
    make_client(email="dup@example.com")
    response = client.post("/api/clients", json={"name": "Other", "email": "dup@example.com"},
                           headers=lawyer_headers)
    assert response.status_code == 409
    assert response.json()["message"] == "Email already exists"


def test_update_to_taken_email_conflicts(client, lawyer_headers, make_client):
    make_client(email="first@example.com")
    second = make_client(email="second@example.com", name="Second")
    response = client.put(f"/api/clients/{second['id']}", json={"email": "first@example.com"},
                          headers=lawyer_headers)
    assert response.status_code == 409


def test_update_rejects_null_name(client, lawyer_headers, make_client):
    acme = make_client()
    response = client.put(f"/api/clients/{acme['id']}", json={"name": None}, headers=lawyer_headers)
    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation Error"
    assert body["errors"] == {"name": "Name cannot be empty"}


def test_list_filters_and_paginates(client, lawyer_headers, make_client):
    make_client(email="a@example.com", name="Alpha Holdings")
    make_client(email="b@example.com", name="Beta Partners", status=False)
    make_client(email="c@example.com", name="Gamma Alpha")

    response = client.get("/api/clients?search=alpha", headers=lawyer_headers)
    page = response.json()["data"]
    assert page["total"] == 2
    assert {c["name"] for c in page["clients"]} == {"Alpha Holdings", "Gamma Alpha"}

    response = client.get("/api/clients?status=false", headers=lawyer_headers)
    assert [c["name"] for c in response.json()["data"]["clients"]] == ["Beta Partners"]

    response = client.get("/api/clients?limit=2&page=2", headers=lawyer_headers)
    page = response.json()["data"]
    assert page["total"] == 3
    assert page["total_pages"] == 2
    assert len(page["clients"]) == 1


def test_invalid_and_unknown_ids(client, lawyer_headers):
    response = client.get("/api/clients/not-an-id", headers=lawyer_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid Client ID"

    response = client.get(f"/api/clients/{uuid.uuid4()}", headers=lawyer_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Client not found"


def test_status_endpoint(client, lawyer_headers, make_client):
    created = make_client()
    response = client.get(f"/api/clients/status/{created['id']}", headers=lawyer_headers)
    assert response.json()["data"] == {"is_approved": True, "status": "active"}


def test_soft_delete_deactivates(client, lawyer_headers, make_client):
    created = make_client()
    response = client.delete(f"/api/clients/{created['id']}?soft=true", headers=lawyer_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Client deactivated successfully"

    response = client.get(f"/api/clients/status/{created['id']}", headers=lawyer_headers)
    assert response.json()["data"] == {"is_approved": False, "status": "inactive"}


def test_hard_delete_blocked_by_related_case(client, lawyer_headers, make_client):
    created = make_client()
    response = client.post("/api/cases", json={
        "client_name": "Acme Ltd",
        "client_no": "CL-1",
        "case_type": "Civil",
        "court": "High Court",
        "petitioner": "Acme",
        "respondent": "Widgets Inc",
        "client_id": created["id"],
    }, headers=lawyer_headers)
    assert response.status_code == 201

    response = client.delete(f"/api/clients/{created['id']}", headers=lawyer_headers)
    assert response.status_code == 409
    assert response.json()["message"] == (
        "Cannot delete client with 1 related cases. Please remove or reassign all cases first."
    )

    response = client.get(f"/api/clients/{created['id']}", headers=lawyer_headers)
    assert response.status_code == 200
    assert len(response.json()["data"]["cases"]) == 1


def test_hard_delete_unlinks_user(client, register, lawyer_headers):
    user, _ = register("client@example.com", role="client")
    response = client.delete(f"/api/clients/{user['client_id']}", headers=lawyer_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Client deleted successfully"

    response = client.get(f"/api/clients/{user['client_id']}", headers=lawyer_headers)
    assert response.status_code == 404


def test_client_role_cannot_delete(client, client_user_headers, make_client):
    created = make_client()
    response = client.delete(f"/api/clients/{created['id']}", headers=client_user_headers)
    assert response.status_code == 403
