"""Authentication gate: token sources, fail-closed resolution, status checks."""
import asyncio

from bson import ObjectId

from conftest import PASSWORD, auth


def _issue(app, user_id, role):
    return app.state.tokens.create_session_token({"_id": user_id, "role": role})


def _find_user(app, email):
    return asyncio.run(app.state.db.users.find_one({"email": email}))


def test_no_token_is_unauthenticated(client):
    r = client.get("/api/jobs/me")
    assert r.status_code == 401
    assert r.json()["error"] == "unauthenticated"


def test_garbage_and_unknown_user_tokens_look_the_same(client, app):
    garbage = client.get("/api/jobs/me", headers=auth("not.a.jwt"))
    ghost = client.get("/api/jobs/me", headers=auth(_issue(app, ObjectId(), "candidate")))
    assert garbage.status_code == ghost.status_code == 401
    assert garbage.json()["error"] == ghost.json()["error"] == "unauthenticated"


def test_cookie_is_used_and_checked_before_header(client, actors):
    _, cand = actors.candidate(email="cand@example.com")
    r = client.post("/api/login", json={"email": "cand@example.com", "password": PASSWORD})
    assert r.status_code == 200

    # cookie alone is enough
    assert client.get("/api/jobs/me").json()["user"]["email"] == "cand@example.com"

    # a broken header does not override a good cookie
    assert client.get("/api/jobs/me", headers=auth("broken")).status_code == 200


def test_unverified_candidate_blocked_even_with_token(client, app):
    r = client.post("/api/register/candidate", json={"name": "C", "email": "c@example.com", "password": PASSWORD})
    user_id = ObjectId(r.json()["user"]["id"])

    r = client.get("/api/jobs/me", headers=auth(_issue(app, user_id, "candidate")))
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden.email_not_verified"


def test_pending_admin_blocked_even_with_token(client, app, actors):
    r = client.post("/api/register/company", json={"name": "A", "email": "a@example.com", "password": PASSWORD})
    actors.verify(r.json()["email_verification_link"])
    user_id = ObjectId(r.json()["user"]["id"])

    r = client.get("/api/jobs/me", headers=auth(_issue(app, user_id, "admin")))
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden.account_not_approved"


def test_tokens_from_another_key_are_rejected(client, app, actors, settings):
    from jobboard.utils.security import TokenService

    _, cand = actors.candidate(email="cand@example.com")
    user = _find_user(app, "cand@example.com")
    foreign = TokenService(settings.model_copy(update={"jwt_secret": "someone-else"}))
    r = client.get("/api/jobs/me", headers=auth(foreign.create_session_token(user)))
    assert r.status_code == 401
