def test_health_check(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_create_then_fetch_returns_same_fields(client, make_candidate):
    created = make_candidate()

    response = client.get(f"/api/candidates/{created['id']}")
    assert response.status_code == 200
    fetched = response.json()

    assert fetched == created
    assert fetched["id"]
    assert fetched["createdAt"] and fetched["updatedAt"]
    assert fetched["name"] == "Ada Lovelace"
    assert fetched["skills"] == ["Python", "SQL"]
    assert fetched["status"] == "active"
    assert fetched["experience"] == 7


def test_missing_candidate_is_404(client):
    response = client.get("/api/candidates/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Candidate not found"


def test_create_rejects_missing_required_fields(client):
    response = client.post("/api/candidates", json={"email": "x@example.com"})
    assert response.status_code == 400
    assert "name" in response.json()["detail"]


def test_create_rejects_unknown_status(client):
    response = client.post("/api/candidates", json={
        "name": "Bob", "email": "bob@example.com", "position": "QA", "status": "sleeping",
    })
    assert response.status_code == 400


def test_duplicate_email_is_client_error(client, make_candidate):
    make_candidate()
    response = client.post("/api/candidates", json={
        "name": "Other Ada", "email": "ada@example.com", "position": "QA",
    })
    assert response.status_code == 400


def test_update_keeps_id_and_created_at(client, make_candidate):
    created = make_candidate()

    response = client.put(f"/api/candidates/{created['id']}", json={
        "status": "hired", "notes": "Offer accepted",
    })
    assert response.status_code == 200
    updated = response.json()

    assert updated["id"] == created["id"]
    assert updated["createdAt"] == created["createdAt"]
    assert updated["status"] == "hired"
    assert updated["notes"] == "Offer accepted"
    # untouched fields survive a partial update
    assert updated["name"] == created["name"]
    assert updated["skills"] == created["skills"]


def test_update_ignores_id_in_payload(client, make_candidate):
    created = make_candidate()
    response = client.put(f"/api/candidates/{created['id']}", json={"id": "hijack", "position": "CTO"})
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert response.json()["position"] == "CTO"


def test_update_rejects_null_for_required_field(client, make_candidate):
    created = make_candidate()
    response = client.put(f"/api/candidates/{created['id']}", json={"name": None})
    assert response.status_code == 400


def test_update_missing_candidate_is_404(client):
    response = client.put("/api/candidates/nope", json={"status": "hired"})
    assert response.status_code == 404


def test_search_matches_name_substring(client, make_candidate):
    make_candidate(name="Grace Hopper", email="grace@example.com")
    make_candidate(name="Alan Turing", email="alan@example.com")

    response = client.get("/api/candidates", params={"search": "hop"})
    names = [c["name"] for c in response.json()]
    assert names == ["Grace Hopper"]


def test_search_treats_wildcards_literally(client, make_candidate):
    make_candidate(name="Grace Hopper", email="grace@example.com")
    make_candidate(name="Alan_Turing", email="alan@example.com")
    make_candidate(name="Alan Kay", email="kay@example.com")

    assert client.get("/api/candidates", params={"search": "%"}).json() == []
    names = [c["name"] for c in client.get("/api/candidates", params={"search": "n_t"}).json()]
    assert names == ["Alan_Turing"]


def test_list_pagination(client, make_candidate):
    for i in range(5):
        make_candidate(name=f"Candidate {i}", email=f"c{i}@example.com")

    first = client.get("/api/candidates", params={"limit": 2}).json()
    rest = client.get("/api/candidates", params={"limit": 10, "offset": 2}).json()

    assert len(first) == 2
    assert len(rest) == 3
    assert not {c["id"] for c in first} & {c["id"] for c in rest}


def test_delete_removes_candidate_even_with_interviews(client, make_candidate, make_interview):
    candidate = make_candidate()
    interview = make_interview(candidate_id=candidate["id"])

    response = client.delete(f"/api/candidates/{candidate['id']}")
    assert response.status_code == 204

    ids = [c["id"] for c in client.get("/api/candidates").json()]
    assert candidate["id"] not in ids
    assert client.get(f"/api/candidates/{candidate['id']}").status_code == 404

    # No cascade: the interview is still there.
    assert client.get(f"/api/interviews/{interview['id']}").status_code == 200


def test_upload_resume_sets_candidate_path(client, make_candidate):
    candidate = make_candidate()
    response = client.post(
        f"/api/candidates/{candidate['id']}/resume",
        files={"resume": ("ada.pdf", b"%PDF-1.4 resume", "application/pdf")},
    )
    assert response.status_code == 200, response.text
    assert response.json()["resume"].endswith("_ada.pdf")
    assert response.json()["createdAt"] == candidate["createdAt"]


def test_upload_resume_rejects_unknown_format(client, make_candidate):
    candidate = make_candidate()
    response = client.post(
        f"/api/candidates/{candidate['id']}/resume",
        files={"resume": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert client.get(f"/api/candidates/{candidate['id']}").json()["resume"] is None
