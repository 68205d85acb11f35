from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from jobboard.models.job import JobType, SalaryRange
from jobboard.models.user import Role


# 1. Input: what the poster sends
class JobCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: Optional[str] = None  # stored as "Remote" when omitted
    salary_range: Optional[SalaryRange] = None
    job_type: Optional[JobType] = None


# 2. Input: update existing job (only the fields sent are changed)
class JobUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    salary_range: Optional[SalaryRange] = None
    job_type: Optional[JobType] = None
    is_active: Optional[bool] = None


class JobOwner(BaseModel):
    id: str
    name: str
    email: str
    role: Role


# 3. Output
class JobResponse(BaseModel):
    id: str
    title: str
    description: str
    company: str
    location: str
    salary_range: Optional[SalaryRange] = None
    job_type: JobType
    posted_by: str
    posted_at: Optional[datetime] = None
    is_active: bool
    applicant_count: int = 0
    owner: Optional[JobOwner] = None

    @classmethod
    def from_document(cls, job: dict) -> "JobResponse":
        owner = job.get("owner")
        return cls(
            id=str(job["_id"]),
            title=job["title"],
            description=job["description"],
            company=job["company"],
            location=job.get("location", "Remote"),
            salary_range=job.get("salary_range"),
            job_type=job.get("job_type", JobType.FULL_TIME),
            posted_by=str(job["posted_by"]),
            posted_at=job.get("posted_at"),
            is_active=job.get("is_active", True),
            applicant_count=len(job.get("applicants", [])),
            owner=JobOwner(
                id=str(owner["_id"]), name=owner["name"], email=owner["email"], role=owner["role"]
            ) if owner else None,
        )


class JobMessageResponse(BaseModel):
    message: str
    job: JobResponse


class JobListResponse(BaseModel):
    jobs: List[JobResponse]
