from datetime import datetime
from enum import Enum
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from .user import utcnow


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"


class SalaryRange(BaseModel):
    min: Optional[int] = None
    max: Optional[int] = None


class Job(BaseModel):
    """A jobs-collection document (without its ``_id``)."""
    model_config = ConfigDict(arbitrary_types_allowed=True, use_enum_values=True, validate_default=True)

    title: str
    description: str
    company: str
    location: str = "Remote"
    salary_range: Optional[SalaryRange] = None
    job_type: JobType = JobType.FULL_TIME
    posted_by: ObjectId
    posted_at: datetime = Field(default_factory=utcnow)
    is_active: bool = True
    applicants: List[ObjectId] = []

    def to_document(self) -> dict:
        return self.model_dump()
