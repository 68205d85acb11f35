"""
Job postings: creation, applications, role-scoped listings and owner-scoped
edits.

A company is the admin plus every employee whose ``company_id`` names that
admin. Jobs the caller may not touch are reported as NotFound.
"""
import logging
from typing import List

from pymongo import ReturnDocument

from jobboard.database import Database, to_object_id
from jobboard.errors import AlreadyApplied, NotFound, ValidationError
from jobboard.models.job import Job
from jobboard.models.user import Role
from jobboard.utils.auth import check_role

logger = logging.getLogger(__name__)

POSTER_ROLES = (Role.ADMIN, Role.SUPERADMIN, Role.EMPLOYEE)
LISTING_ROLES = (Role.CANDIDATE, Role.ADMIN, Role.EMPLOYEE)
EDITOR_ROLES = (Role.ADMIN, Role.EMPLOYEE)

JOB_NOT_FOUND = "Job not found or no permission."


class JobService:

    def __init__(self, db: Database):
        self.db = db

    async def post_job(self, user: dict, data: dict) -> dict:
        check_role(user, POSTER_ROLES)

        document = Job(posted_by=user["_id"], **data).to_document()
        result = await self.db.jobs.insert_one(document)
        document["_id"] = result.inserted_id
        logger.info("Job %s posted by %s", document["_id"], user["_id"])
        return document

    async def apply(self, user: dict, job_id: str):
        job_oid = to_object_id(job_id)
        if job_oid is None:
            raise NotFound("Job not found")

        # single conditional update so concurrent applies cannot double-append
        result = await self.db.jobs.update_one(
            {"_id": job_oid, "applicants": {"$ne": user["_id"]}},
            {"$addToSet": {"applicants": user["_id"]}},
        )
        if result.matched_count:
            return

        if await self.db.jobs.find_one({"_id": job_oid}, {"_id": 1}) is None:
            raise NotFound("Job not found")
        raise AlreadyApplied()

    async def company_member_ids(self, company_id) -> List:
        members = await self.db.users.find(
            {"$or": [{"_id": company_id}, {"company_id": company_id}]}, {"_id": 1}
        ).to_list(None)
        return [m["_id"] for m in members]

    async def list_jobs(self, user: dict) -> List[dict]:
        check_role(user, LISTING_ROLES)

        query = {"is_active": True}
        if user["role"] != Role.CANDIDATE.value:
            company_id = user["_id"] if user["role"] == Role.ADMIN.value else user.get("company_id")
            if not company_id:
                raise ValidationError("Company ID not found.")
            query["posted_by"] = {"$in": await self.company_member_ids(company_id)}

        jobs = await self.db.jobs.find(query).to_list(None)
        return await self.attach_owners(jobs)

    async def attach_owners(self, jobs: List[dict]) -> List[dict]:
        """Add an ``owner`` summary {_id, name, email, role} to each job."""
        owner_ids = list({job["posted_by"] for job in jobs})
        owners = await self.db.users.find(
            {"_id": {"$in": owner_ids}}, {"name": 1, "email": 1, "role": 1}
        ).to_list(None)
        by_id = {o["_id"]: o for o in owners}
        for job in jobs:
            job["owner"] = by_id.get(job["posted_by"])
        return jobs

    def allowed_owners(self, user: dict) -> List:
        allowed = [user["_id"]]
        if user["role"] == Role.EMPLOYEE.value and user.get("company_id"):
            allowed.append(user["company_id"])
        return allowed

    def _owned_job_query(self, user: dict, job_id: str):
        check_role(user, EDITOR_ROLES)
        job_oid = to_object_id(job_id)
        if job_oid is None:
            raise NotFound(JOB_NOT_FOUND)
        return {"_id": job_oid, "posted_by": {"$in": self.allowed_owners(user)}}

    async def update_job(self, user: dict, job_id: str, changes: dict) -> dict:
        """Set only the fields present in ``changes``."""
        query = self._owned_job_query(user, job_id)
        if changes:
            job = await self.db.jobs.find_one_and_update(
                query, {"$set": changes}, return_document=ReturnDocument.AFTER
            )
        else:
            job = await self.db.jobs.find_one(query)
        if job is None:
            raise NotFound(JOB_NOT_FOUND)
        return job

    async def delete_job(self, user: dict, job_id: str):
        deleted = await self.db.jobs.find_one_and_delete(self._owned_job_query(user, job_id))
        if deleted is None:
            raise NotFound(JOB_NOT_FOUND)
        logger.info("Job %s deleted by %s", deleted["_id"], user["_id"])
