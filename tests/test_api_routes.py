"""
End-to-end tests for the auth and conversation endpoints.
"""
from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from mentesegura.api import handlers
from mentesegura.api.auth_routes import router as auth_router
from mentesegura.api.routes import router as api_router
from mentesegura.services.database import close_database, init_database

pytestmark = pytest.mark.integration


@pytest.fixture
def client(db_url):
    @asynccontextmanager
    async def lifespan(app):
        await init_database(db_url)
        yield
        await close_database()

    api = FastAPI(lifespan=lifespan)
    handlers.install(api)
    api.include_router(auth_router)
    api.include_router(api_router)

    with TestClient(api) as c:
        yield c


def signup(client, email="aluno@escola.br", password="segredo1"):
    resp = client.post("/auth/register", json={"email": email, "password": password, "full_name": "Aluno"})
    assert resp.status_code == 201, resp.text
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


class TestAuthEndpoints:

    def test_register_login_me(self, client):
        headers = signup(client)
        resp = client.get("/auth/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["email"] == "aluno@escola.br"
        assert resp.json()["full_name"] == "Aluno"

    def test_duplicate_registration(self, client):
        signup(client)
        resp = client.post("/auth/register", json={"email": "aluno@escola.br", "password": "segredo1"})
        assert resp.status_code == 409

    def test_short_password_rejected(self, client):
        resp = client.post("/auth/register", json={"email": "aluno@escola.br", "password": "123"})
        assert resp.status_code == 422

    def test_invalid_email_rejected(self, client):
        resp = client.post("/auth/register", json={"email": "not-an-email", "password": "segredo1"})
        assert resp.status_code == 422

    def test_bad_credentials(self, client):
        signup(client)
        resp = client.post("/auth/login", json={"email": "aluno@escola.br", "password": "errada"})
        assert resp.status_code == 401

    def test_me_requires_token(self, client):
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"error": "No authorization header"}
        assert resp.headers["www-authenticate"] == "Bearer"


class TestConversationEndpoints:

    def test_current_conversation_is_stable(self, client):
        headers = signup(client)
        first = client.get("/api/conversations/current", headers=headers).json()
        second = client.get("/api/conversations/current", headers=headers).json()
        assert first["id"] == second["id"]

    def test_add_and_list_messages(self, client):
        headers = signup(client)
        conv_id = client.get("/api/conversations/current", headers=headers).json()["id"]
        url = f"/api/conversations/{conv_id}/messages"

        resp = client.post(url, json={"role": "user", "content": "Oi"}, headers=headers)
        assert resp.status_code == 201
        client.post(
            url,
            json={"role": "assistant", "content": "⚠️ ATENÇÃO: procure ajuda", "is_critical": True},
            headers=headers,
        )

        rows = client.get(url, headers=headers).json()
        assert [(r["role"], r["is_critical"]) for r in rows] == [("user", False), ("assistant", True)]

    def test_other_users_conversation_is_hidden(self, client):
        owner = signup(client, "dono@escola.br")
        other = signup(client, "outro@escola.br")
        conv_id = client.get("/api/conversations/current", headers=owner).json()["id"]
        url = f"/api/conversations/{conv_id}/messages"

        assert client.get(url, headers=other).status_code == 404
        resp = client.post(url, json={"role": "user", "content": "invasão"}, headers=other)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Conversa não encontrada."}

    def test_invalid_role(self, client):
        headers = signup(client)
        conv_id = client.get("/api/conversations/current", headers=headers).json()["id"]
        resp = client.post(
            f"/api/conversations/{conv_id}/messages",
            json={"role": "system", "content": "x"},
            headers=headers,
        )
        assert resp.status_code == 422
