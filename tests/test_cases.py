import pytest

CASE_PAYLOAD = {
    "client_name": "Acme Ltd",
    "client_no": "CL-001",
    "case_type": "Commercial",
    "court": "High Court",
    "petitioner": "Acme Ltd",
    "respondent": "Widgets Inc",
    "next_date": "2030-05-01T09:00:00Z",
}


@pytest.fixture
def case(client, lawyer_headers):
    response = client.post("/api/cases", json=CASE_PAYLOAD, headers=lawyer_headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_case_seeds_timeline(case, lawyer):
    user, _ = lawyer
    assert case["status"] == "Pending"
    assert case["is_archived"] is False
    assert case["assignee"]["id"] == user["id"]
    assert case["creator"]["id"] == user["id"]
    assert [entry["description"] for entry in case["timeline"]] == ["Case created"]
    assert case["timeline"][0]["author"]["id"] == user["id"]


def test_create_case_reports_every_blank_field(client, lawyer_headers):
    response = client.post("/api/cases", json={
        "client_name": "Acme Ltd",
        "client_no": "  ",
        "case_type": "Commercial",
        "court": "",
    }, headers=lawyer_headers)
    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation Error"
    assert body["errors"] == {
        "client_no": "Client number is required",
        "court": "Court is required",
        "petitioner": "Petitioner is required",
        "respondent": "Respondent is required",
    }


def test_duplicate_client_number_conflicts(client, lawyer_headers, case):
    response = client.post("/api/cases", json=CASE_PAYLOAD, headers=lawyer_headers)
    assert response.status_code == 409


def test_unknown_assignee_is_rejected(client, lawyer_headers):
    payload = {**CASE_PAYLOAD, "assigned_to": "00000000-0000-0000-0000-000000000000"}
    response = client.post("/api/cases", json=payload, headers=lawyer_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Assigned user not found"


def test_update_merges_and_appends(client, lawyer_headers, case):
    response = client.put(f"/api/cases/{case['id']}", json={
        "status": "On-Trial",
        "is_important": True,
        "timeline": {"description": "Hearing adjourned", "date": "2030-05-01T10:00:00"},
        "notes": {"content": "Client to bring originals"},
    }, headers=lawyer_headers)
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["status"] == "On-Trial"
    assert updated["is_important"] is True
    assert updated["court"] == "High Court"
    assert [entry["description"] for entry in updated["timeline"]] == ["Case created", "Hearing adjourned"]
    assert [note["content"] for note in updated["notes"]] == ["Client to bring originals"]

    response = client.put(f"/api/cases/{case['id']}", json={
        "notes": {"content": "Second note"},
    }, headers=lawyer_headers)
    assert len(response.json()["data"]["notes"]) == 2


def test_update_rejects_null_and_blank_required_fields(client, lawyer_headers, case):
    response = client.put(f"/api/cases/{case['id']}", json={"status": None, "court": "   "},
                          headers=lawyer_headers)
    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation Error"
    assert body["errors"]["status"] == "Status cannot be empty"
    assert body["errors"]["court"] == "Court is required"

    unchanged = client.get(f"/api/cases/{case['id']}", headers=lawyer_headers).json()["data"]
    assert (unchanged["status"], unchanged["court"]) == (case["status"], "High Court")


def test_update_strips_required_fields(client, lawyer_headers, case):
    response = client.put(f"/api/cases/{case['id']}", json={"court": "  Court of Appeal "},
                          headers=lawyer_headers)
    assert response.status_code == 200
    assert response.json()["data"]["court"] == "Court of Appeal"


def test_add_document(client, lawyer_headers, case):
    response = client.post(f"/api/cases/{case['id']}/documents", json={
        "title": "Plaint",
        "file_url": "https://files.example.com/plaint.pdf",
    }, headers=lawyer_headers)
    assert response.status_code == 200
    documents = response.json()["data"]["documents"]
    assert [doc["title"] for doc in documents] == ["Plaint"]
    assert documents[0]["uploader"]["email"] == "lawyer@example.com"


def test_archive_keeps_the_row(client, lawyer_headers, case):
    response = client.delete(f"/api/cases/{case['id']}", headers=lawyer_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Case archived successfully"

    response = client.get(f"/api/cases/{case['id']}", headers=lawyer_headers)
    assert response.json()["data"]["is_archived"] is True

    response = client.get("/api/cases?is_archived=false", headers=lawyer_headers)
    assert response.json()["data"]["total"] == 0


def test_list_filters(client, lawyer_headers, case):
    other = {**CASE_PAYLOAD, "client_no": "CL-002", "case_type": "Family", "next_date": "2031-01-01T00:00:00"}
    client.post("/api/cases", json=other, headers=lawyer_headers)

    response = client.get("/api/cases?search=family", headers=lawyer_headers)
    assert [c["client_no"] for c in response.json()["data"]["cases"]] == ["CL-002"]

    response = client.get("/api/cases?end_date=2030-12-31T00:00:00", headers=lawyer_headers)
    assert [c["client_no"] for c in response.json()["data"]["cases"]] == ["CL-001"]


def test_unknown_case_is_404(client, lawyer_headers):
    response = client.get("/api/cases/00000000-0000-0000-0000-000000000000", headers=lawyer_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Case not found"
