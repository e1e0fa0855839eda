# tests/test_environment_router.py
"""HTTP tests for the environment data endpoints."""

import pytest
from fastapi.testclient import TestClient

from authhub import auth
from authhub.database import get_db
from authhub.main import app


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def secret_headers(environment):
    return {"tl-env-secret-key": environment.secret_key}


def url(environment, suffix=""):
    return f"/environments/{environment.id}/data{suffix}"


class TestCredentials:

    def test_public_read_requires_public_key(self, client, environment):
        assert client.get(url(environment)).status_code == 401
        assert client.get(url(environment), headers={"tl-public-key": "pk_wrong"}).status_code == 401

    def test_secret_key_of_another_environment_is_rejected(self, client, environment, other_environment):
        response = client.get(
            url(environment, "/enableSignUp"),
            headers={"tl-env-secret-key": other_environment.secret_key},
        )

        assert response.status_code == 401

    def test_unknown_environment_is_404(self, client):
        response = client.get("/environments/ghost/data", headers={"tl-public-key": "pk_test_1"})

        assert response.status_code == 404

    def test_internal_read_without_configured_key(self, client, environment, monkeypatch):
        monkeypatch.setattr(auth, "INTERNAL_API_KEY", None)

        assert client.get(url(environment, "/app")).status_code == 500


class TestDataEndpoints:

    def test_upsert_then_replace(self, client, environment, secret_headers):
        created = client.post(url(environment), json={"id": "Enable SignUp", "value": True}, headers=secret_headers)
        replaced = client.post(url(environment), json={"id": "enableSignUp", "value": False}, headers=secret_headers)

        assert created.status_code == 201
        assert created.json()["id"] == "enableSignUp"
        assert replaced.status_code == 200
        assert replaced.json()["value"] is False

    def test_empty_key_is_rejected(self, client, environment, secret_headers):
        response = client.post(url(environment), json={"id": "", "value": 1}, headers=secret_headers)

        assert response.status_code == 422

    def test_get_and_delete(self, client, environment, secret_headers):
        client.post(url(environment), json={"id": "theme", "value": {"mode": "dark"}}, headers=secret_headers)

        assert client.get(url(environment, "/theme"), headers=secret_headers).json() == {"mode": "dark"}
        assert client.delete(url(environment, "/theme"), headers=secret_headers).status_code == 204
        assert client.delete(url(environment, "/theme"), headers=secret_headers).status_code == 404
        assert client.get(url(environment, "/theme"), headers=secret_headers).status_code == 404

    def test_update_missing_key_is_404(self, client, environment, secret_headers):
        response = client.put(url(environment), json={"id": "nothing", "value": 1}, headers=secret_headers)

        assert response.status_code == 404

    def test_public_read_exposes_only_public_keys(self, client, environment, secret_headers):
        client.post(url(environment), json={"id": "enableSignUp", "value": True}, headers=secret_headers)
        client.post(url(environment), json={"id": "stripeSecret", "value": "s3cr3t"}, headers=secret_headers)

        body = client.get(url(environment), headers={"tl-public-key": environment.public_key}).json()

        assert body["enableSignUp"] is True
        assert body["appName"] == "Acme"
        assert "stripeSecret" not in body

    def test_internal_read_of_requested_keys(self, client, environment, secret_headers, monkeypatch):
        monkeypatch.setattr(auth, "INTERNAL_API_KEY", "internal-key")
        client.post(url(environment), json={"id": "stripeSecret", "value": "s3cr3t"}, headers=secret_headers)

        response = client.get(
            url(environment, "/app"),
            params={"ids": ["Stripe Secret", "missing"]},
            headers={"tl-internal-key": "internal-key"},
        )

        assert response.status_code == 200
        assert response.json()["stripeSecret"] == "s3cr3t"
        assert "missing" not in response.json()
