"""
Shared fixtures: an app wired to an in-memory Mongo (mongomock-motor) with
its own signing keys, plus helpers that drive accounts through the API.
"""
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from jobboard.config import Settings
from jobboard.main import create_app

PASSWORD = "Testpass123!"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_name="jobboard_test",
        jwt_secret="test-session-secret",
        jwt_email_secret="test-email-secret",
        public_base_url="http://testserver",
        log_level="WARNING",
    )


@pytest.fixture()
def app(settings):
    return create_app(settings, client=AsyncMongoMockClient())


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def token_from_link(link: str) -> str:
    return link.rsplit("/", 1)[-1]


class Actors:
    """Creates users through the public API and returns their bearer headers."""

    def __init__(self, client: TestClient):
        self.client = client

    def login(self, email, password=PASSWORD):
        r = self.client.post("/api/login", json={"email": email, "password": password})
        # requests below authenticate with the header only
        self.client.cookies.clear()
        return r

    def login_headers(self, email, password=PASSWORD) -> dict:
        r = self.login(email, password)
        assert r.status_code == 200, r.text
        return auth(r.json()["token"])

    def verify(self, link: str):
        r = self.client.get(f"/api/verify-email/{token_from_link(link)}")
        assert r.status_code == 200, r.text
        return r

    def superadmin(self, email="root@example.com") -> dict:
        r = self.client.post("/api/create-superadmin", json={"name": "Root", "email": email, "password": PASSWORD})
        assert r.status_code == 201, r.text
        return self.login_headers(email)

    def company(self, root: dict, email="acme@example.com", name="Acme"):
        """Registered, verified and approved admin. Returns (id, headers)."""
        r = self.client.post("/api/register/company", json={"name": name, "email": email, "password": PASSWORD})
        assert r.status_code == 201, r.text
        body = r.json()
        self.verify(body["email_verification_link"])
        company_id = body["user"]["id"]
        r = self.client.post(f"/api/approve/company/{company_id}", headers=root)
        assert r.status_code == 200, r.text
        return company_id, self.login_headers(email)

    def employee(self, company: dict, email="emp@example.com", name="Emp", position="HR"):
        r = self.client.post(
            "/api/create/employee",
            json={"name": name, "email": email, "password": PASSWORD, "position": position},
            headers=company,
        )
        assert r.status_code == 201, r.text
        return r.json()["user"]["id"], self.login_headers(email)

    def candidate(self, email="cand@example.com", name="Cand"):
        r = self.client.post("/api/register/candidate", json={"name": name, "email": email, "password": PASSWORD})
        assert r.status_code == 201, r.text
        self.verify(r.json()["email_verification_link"])
        return r.json()["user"]["id"], self.login_headers(email)

    def post_job(self, headers: dict, title="Backend Engineer", **fields):
        body = {"title": title, "description": "Build APIs", "company": "Acme", **fields}
        r = self.client.post("/api/jobs/postjob", json=body, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["job"]["id"]


@pytest.fixture()
def actors(client) -> Actors:
    return Actors(client)


@pytest.fixture()
def root(actors) -> dict:
    return actors.superadmin()
