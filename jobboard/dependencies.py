from fastapi import Request

from jobboard.services.accounts import AccountService
from jobboard.services.jobs import JobService


def get_account_service(request: Request) -> AccountService:
    state = request.app.state
    return AccountService(state.db, state.tokens, state.hasher, state.mailer, state.settings)


def get_job_service(request: Request) -> JobService:
    return JobService(request.app.state.db)
