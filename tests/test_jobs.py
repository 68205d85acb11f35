import pytest


@pytest.fixture()
def world(actors, root):
    """Two companies, an employee in the first, and a candidate."""
    acme_id, acme = actors.company(root, email="acme@example.com")
    globex_id, globex = actors.company(root, email="globex@example.com")
    emp_id, emp = actors.employee(acme, email="emp@example.com")
    cand_id, cand = actors.candidate(email="cand@example.com")
    return {
        "root": root,
        "acme": acme, "acme_id": acme_id,
        "globex": globex, "globex_id": globex_id,
        "emp": emp, "emp_id": emp_id,
        "cand": cand, "cand_id": cand_id,
    }


def _titles(client, headers):
    r = client.get("/api/jobs/all", headers=headers)
    assert r.status_code == 200, r.text
    return sorted(j["title"] for j in r.json()["jobs"])


# ---------------------------------------------------------------------------
# Posting
# ---------------------------------------------------------------------------

def test_post_job_defaults_and_owner(client, actors, world):
    r = client.post(
        "/api/jobs/postjob",
        json={"title": "Dev", "description": "Code", "company": "Acme"},
        headers=world["acme"],
    )
    assert r.status_code == 201, r.text
    job = r.json()["job"]
    assert job["location"] == "Remote"
    assert job["job_type"] == "Full-time"
    assert job["is_active"] is True
    assert job["posted_by"] == world["acme_id"]
    assert job["applicant_count"] == 0


def test_post_job_with_salary_and_type(client, world):
    r = client.post(
        "/api/jobs/postjob",
        json={
            "title": "Intern", "description": "Learn", "company": "Acme",
            "location": "Berlin", "job_type": "Internship",
            "salary_range": {"min": 1000, "max": 2000},
        },
        headers=world["emp"],
    )
    assert r.status_code == 201, r.text
    job = r.json()["job"]
    assert job["salary_range"] == {"min": 1000, "max": 2000}
    assert job["job_type"] == "Internship"


def test_superadmin_can_post(actors, world):
    assert actors.post_job(world["root"])


def test_candidate_cannot_post(client, world):
    r = client.post(
        "/api/jobs/postjob",
        json={"title": "Dev", "description": "Code", "company": "Acme"},
        headers=world["cand"],
    )
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden.insufficient_role"


def test_unknown_job_type_is_validation_error(client, world):
    r = client.post(
        "/api/jobs/postjob",
        json={"title": "Dev", "description": "Code", "company": "Acme", "job_type": "Gig"},
        headers=world["acme"],
    )
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


# ---------------------------------------------------------------------------
# Applying
# ---------------------------------------------------------------------------

def test_apply_twice(client, actors, world):
    job_id = actors.post_job(world["acme"])

    first = client.post(f"/api/jobs/{job_id}/apply", headers=world["cand"])
    assert first.status_code == 200, first.text

    second = client.post(f"/api/jobs/{job_id}/apply", headers=world["cand"])
    assert second.status_code == 409
    assert second.json()["error"] == "already_applied"

    jobs = client.get("/api/jobs/all", headers=world["cand"]).json()["jobs"]
    assert jobs[0]["applicant_count"] == 1


def test_any_role_may_apply(client, actors, world):
    job_id = actors.post_job(world["acme"])
    assert client.post(f"/api/jobs/{job_id}/apply", headers=world["globex"]).status_code == 200
    assert client.post(f"/api/jobs/{job_id}/apply", headers=world["cand"]).status_code == 200
    jobs = client.get("/api/jobs/all", headers=world["cand"]).json()["jobs"]
    assert jobs[0]["applicant_count"] == 2


def test_apply_to_missing_job(client, world):
    assert client.post("/api/jobs/5f0000000000000000000000/apply", headers=world["cand"]).status_code == 404
    assert client.post("/api/jobs/garbage/apply", headers=world["cand"]).status_code == 404


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

def test_candidate_sees_only_active_jobs(client, actors, world):
    actors.post_job(world["acme"], title="Open")
    closed = actors.post_job(world["globex"], title="Closed")
    client.put(f"/api/jobs/{closed}", json={"is_active": False}, headers=world["globex"])

    r = client.get("/api/jobs/all", headers=world["cand"])
    jobs = r.json()["jobs"]
    assert [j["title"] for j in jobs] == ["Open"]
    assert all(j["is_active"] for j in jobs)
    assert jobs[0]["owner"]["email"] == "acme@example.com"
    assert "password" not in jobs[0]["owner"]


def test_company_scoped_listing(client, actors, world):
    actors.post_job(world["acme"], title="By Acme")
    actors.post_job(world["emp"], title="By Emp")
    actors.post_job(world["globex"], title="By Globex")
    hidden = actors.post_job(world["emp"], title="Hidden")
    client.put(f"/api/jobs/{hidden}", json={"is_active": False}, headers=world["emp"])

    assert _titles(client, world["acme"]) == ["By Acme", "By Emp"]
    assert _titles(client, world["emp"]) == ["By Acme", "By Emp"]
    assert _titles(client, world["globex"]) == ["By Globex"]


def test_employee_sees_coworker_jobs(client, actors, world):
    _, coworker = actors.employee(world["acme"], email="co@example.com")
    actors.post_job(coworker, title="By Coworker")
    assert _titles(client, world["emp"]) == ["By Coworker"]


def test_superadmin_cannot_list(client, world):
    r = client.get("/api/jobs/all", headers=world["root"])
    assert r.status_code == 403


# ---------------------------------------------------------------------------
# Updating / deleting
# ---------------------------------------------------------------------------

def test_partial_update_keeps_other_fields(client, actors, world):
    job_id = actors.post_job(world["acme"], title="Dev", location="Paris", job_type="Contract")

    r = client.put(f"/api/jobs/{job_id}", json={"title": "Senior Dev"}, headers=world["acme"])
    assert r.status_code == 200, r.text
    job = r.json()["job"]
    assert job["title"] == "Senior Dev"
    assert job["location"] == "Paris"
    assert job["job_type"] == "Contract"
    assert job["description"] == "Build APIs"


def test_employee_may_edit_admin_job(client, actors, world):
    job_id = actors.post_job(world["acme"])
    r = client.put(f"/api/jobs/{job_id}", json={"location": "Remote-EU"}, headers=world["emp"])
    assert r.status_code == 200
    assert client.delete(f"/api/jobs/{job_id}", headers=world["emp"]).status_code == 200


def test_admin_may_not_edit_employee_job(client, actors, world):
    job_id = actors.post_job(world["emp"])
    r = client.put(f"/api/jobs/{job_id}", json={"title": "x"}, headers=world["acme"])
    assert r.status_code == 404


def test_other_company_gets_not_found(client, actors, world):
    job_id = actors.post_job(world["acme"], title="Mine")

    r = client.put(f"/api/jobs/{job_id}", json={"title": "Stolen"}, headers=world["globex"])
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"
    assert client.delete(f"/api/jobs/{job_id}", headers=world["globex"]).status_code == 404

    assert _titles(client, world["acme"]) == ["Mine"]


def test_candidate_cannot_edit(client, actors, world):
    job_id = actors.post_job(world["acme"])
    assert client.put(f"/api/jobs/{job_id}", json={"title": "x"}, headers=world["cand"]).status_code == 403


def test_inactive_job_still_editable_and_deletable(client, actors, world):
    job_id = actors.post_job(world["acme"])
    client.put(f"/api/jobs/{job_id}", json={"is_active": False}, headers=world["acme"])

    r = client.put(f"/api/jobs/{job_id}", json={"is_active": True}, headers=world["acme"])
    assert r.json()["job"]["is_active"] is True
    assert client.delete(f"/api/jobs/{job_id}", headers=world["acme"]).status_code == 200
    assert client.delete(f"/api/jobs/{job_id}", headers=world["acme"]).status_code == 404


def test_deleting_admin_keeps_jobs(client, actors, world):
    job_id = actors.post_job(world["acme"], title="Orphan")
    assert client.delete(f"/api/admins/{world['acme_id']}", headers=world["root"]).status_code == 200

    jobs = client.get("/api/jobs/all", headers=world["cand"]).json()["jobs"]
    assert [j["id"] for j in jobs] == [job_id]
    assert jobs[0]["owner"] is None
