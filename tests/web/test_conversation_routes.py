"""Tests for conversation analysis routes."""


def test_analyze_requires_auth(client):
    res = client.post("/api/conversation/analyze", json={"text": "I know Python"})
    assert res.status_code == 401


def test_analyze_auto_stages_commits(client, auth_headers):
    res = client.post(
        "/api/conversation/analyze",
        json={"text": "I know Python"},
        headers=auth_headers,
    )
    assert res.status_code == 200
    data = res.json()
    assert [a["type"] for a in data["analysis"]["actions"]] == ["skill"]
    assert data["batch"]["batch_title"] == "Conversation Session"
    assert data["batch"]["pending_commits"] == 1
    assert data["commits"][0]["status"] == "pending"
    assert data["commits"][0]["user_id"] == "user-123"
    assert isinstance(data["response"], str) and data["response"]


def test_analyze_manual_stages_nothing(client, auth_headers):
    res = client.post(
        "/api/conversation/analyze",
        json={"text": "I know Python", "mode": "manual"},
        headers=auth_headers,
    )
    data = res.json()
    assert data["analysis"]["actions"]
    assert data["batch"] is None
    assert data["commits"] == []

    listed = client.get("/api/commits", headers=auth_headers)
    assert listed.json() == []


def test_analyze_without_facts(client, auth_headers):
    res = client.post(
        "/api/conversation/analyze",
        json={"text": "The weather was lovely."},
        headers=auth_headers,
    )
    data = res.json()
    assert data["analysis"]["actions"] == []
    assert data["commits"] == []


def test_analyze_rejects_bad_mode(client, auth_headers):
    res = client.post(
        "/api/conversation/analyze",
        json={"text": "I know Python", "mode": "eager"},
        headers=auth_headers,
    )
    assert res.status_code == 422


def test_confirm_stages_into_named_batch(client, auth_headers):
    res = client.post(
        "/api/conversation/confirm",
        json={"text": "I know Python", "batch_title": "Voice note", "batch_type": "voice_session"},
        headers=auth_headers,
    )
    assert res.status_code == 201
    data = res.json()
    assert data["batch"]["batch_title"] == "Voice note"
    assert data["batch"]["batch_type"] == "voice_session"
    assert len(data["commits"]) == 1


def test_confirm_target_types(client, auth_headers):
    res = client.post(
        "/api/conversation/confirm",
        json={"text": "I know Python. I work at Google.", "target_types": ["company"]},
        headers=auth_headers,
    )
    assert [c["extraction_type"] for c in res.json()["commits"]] == ["company"]


def test_confirm_empty_text(client, auth_headers):
    res = client.post("/api/conversation/confirm", json={"text": ""}, headers=auth_headers)
    assert res.status_code == 422
