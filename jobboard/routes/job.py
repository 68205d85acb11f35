# ========================================
# jobboard/routes/job.py - postings, applications, role-scoped listings
# ========================================

from fastapi import APIRouter, Depends, status

from jobboard.dependencies import get_job_service
from jobboard.schemas.job import JobCreate, JobListResponse, JobMessageResponse, JobResponse, JobUpdate
from jobboard.schemas.user import MessageResponse, UserSummary
from jobboard.services.jobs import EDITOR_ROLES, LISTING_ROLES, POSTER_ROLES, JobService
from jobboard.utils.auth import get_current_user, require_roles

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])


# ✅ 1. POST A JOB (Admin/SuperAdmin/Employee)
@router.post("/postjob", response_model=JobMessageResponse, status_code=status.HTTP_201_CREATED)
async def post_job(body: JobCreate, current_user: dict = Depends(require_roles(*POSTER_ROLES)),
                   jobs: JobService = Depends(get_job_service)):
    job = await jobs.post_job(current_user, body.model_dump(exclude_none=True))
    return JobMessageResponse(message="Job posted successfully", job=JobResponse.from_document(job))


# ✅ 2. APPLY TO A JOB (any signed-in user)
@router.post("/{job_id}/apply", response_model=MessageResponse)
async def apply_to_job(job_id: str, current_user: dict = Depends(get_current_user),
                       jobs: JobService = Depends(get_job_service)):
    await jobs.apply(current_user, job_id)
    return {"message": "Applied successfully"}


# ✅ 3. LIST JOBS (what you see depends on your role)
@router.get("/all", response_model=JobListResponse)
async def list_jobs(current_user: dict = Depends(require_roles(*LISTING_ROLES)),
                    jobs: JobService = Depends(get_job_service)):
    """
    Candidates see every active job. Admins and employees see the active jobs
    of their company: the admin and all of the admin's employees.
    """
    return JobListResponse(jobs=[JobResponse.from_document(j) for j in await jobs.list_jobs(current_user)])


# ✅ 4. CURRENT USER
@router.get("/me")
async def me(current_user: dict = Depends(get_current_user)):
    return {"user": UserSummary(**current_user)}


# ✅ 5. UPDATE JOB (own jobs; employees also their admin's jobs)
@router.put("/{job_id}", response_model=JobMessageResponse)
async def update_job(job_id: str, body: JobUpdate, current_user: dict = Depends(require_roles(*EDITOR_ROLES)),
                     jobs: JobService = Depends(get_job_service)):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True, mode="json").items() if v is not None}
    job = await jobs.update_job(current_user, job_id, changes)
    return JobMessageResponse(message="Job updated successfully.", job=JobResponse.from_document(job))


# ✅ 6. DELETE JOB
@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, current_user: dict = Depends(require_roles(*EDITOR_ROLES)),
                     jobs: JobService = Depends(get_job_service)):
    await jobs.delete_job(current_user, job_id)
    return {"message": "Job deleted successfully."}
