"""Tests for JWT authentication on API routes."""

from jose import jwt


def test_missing_token(client):
    res = client.get("/api/commits")
    assert res.status_code == 401


def test_bad_token(client):
    res = client.get("/api/commits", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid or expired token"


def test_wrong_secret(client):
    token = jwt.encode({"sub": "u1"}, "other-secret", algorithm="HS256")
    res = client.get("/api/commits", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_missing_sub(client, jwt_secret):
    token = jwt.encode({"email": "x@y.com"}, jwt_secret, algorithm="HS256")
    res = client.get("/api/commits", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid token: missing sub"


def test_health_is_public(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
