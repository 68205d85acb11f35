# ========================================
# jobboard/routes/user.py - accounts, approval and login
# ========================================

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from jobboard.dependencies import get_account_service
from jobboard.errors import JobBoardError
from jobboard.models.user import Role, UserStatus
from jobboard.schemas.user import (
    AdminUpdate,
    EmployeeCreate,
    EmployeeUpdate,
    LoginResponse,
    MessageResponse,
    RegisterResponse,
    UserCreate,
    UserListResponse,
    UserLogin,
    UserMessageResponse,
    UserResponse,
    user_list,
)
from jobboard.services.accounts import AccountService
from jobboard.utils.auth import SESSION_COOKIE, get_current_user, require_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])

superadmin_only = require_roles(Role.SUPERADMIN)
admin_only = require_roles(Role.ADMIN)


# ===========================
# PUBLIC ENDPOINTS
# ===========================

@router.get("/verify-email/{token}")
async def verify_email(token: str, request: Request, accounts: AccountService = Depends(get_account_service)):
    """Consume an email-verification link. Redirects to the frontend when one is configured."""
    frontend_url = request.app.state.settings.frontend_url
    try:
        user = await accounts.verify_email(token)
    except JobBoardError as exc:
        logger.info("Email verification failed: %s", exc.message)
        if frontend_url:
            return RedirectResponse(f"{frontend_url.rstrip('/')}/verify-failed")
        raise

    if frontend_url:
        return RedirectResponse(f"{frontend_url.rstrip('/')}/verify-success")
    return {"message": "Email verified successfully.", "user": UserResponse.from_document(user)}


@router.post("/register/company", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_company(body: UserCreate, accounts: AccountService = Depends(get_account_service)):
    """Register a company (admin). Needs email verification and superadmin approval."""
    user, link = await accounts.register_company(body.name, body.email, body.password)
    return RegisterResponse(
        message="Company registered successfully. Please verify your email.",
        user=UserResponse.from_document(user),
        email_verification_link=link,
    )


@router.post("/register/candidate", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_candidate(body: UserCreate, accounts: AccountService = Depends(get_account_service)):
    user, link = await accounts.register_candidate(body.name, body.email, body.password)
    return RegisterResponse(
        message="Candidate registered successfully. Please verify your email to login.",
        user=UserResponse.from_document(user),
        email_verification_link=link,
    )


@router.post("/create-superadmin", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_superadmin(body: UserCreate, accounts: AccountService = Depends(get_account_service)):
    """Bootstrap a superadmin. Open by design; disable it in the deployment after first use."""
    await accounts.bootstrap_superadmin(body.name, body.email, body.password)
    return {"message": "Superadmin created successfully"}


@router.post("/login", response_model=LoginResponse)
async def login(body: UserLogin, response: Response, request: Request,
                accounts: AccountService = Depends(get_account_service)):
    token, user = await accounts.login(body.email, body.password)

    settings = request.app.state.settings
    response.set_cookie(
        SESSION_COOKIE,
        token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=int(settings.session_ttl.total_seconds()),
    )
    return LoginResponse(message="Login successful", token=token, user=UserResponse.from_document(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, current_user: dict = Depends(get_current_user)):
    response.delete_cookie(SESSION_COOKIE)
    return {"message": "Logged out successfully"}


# ===========================
# ADMIN (COMPANY) ENDPOINTS
# ===========================

@router.post("/register/employee", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_employee(body: UserCreate, current_user: dict = Depends(admin_only),
                            accounts: AccountService = Depends(get_account_service)):
    user, link = await accounts.register_employee(current_user, body.name, body.email, body.password)
    return RegisterResponse(
        message="Employee registered successfully and is pending Company approval.",
        user=UserResponse.from_document(user),
        email_verification_link=link,
    )


@router.post("/create/employee", response_model=UserMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(body: EmployeeCreate, current_user: dict = Depends(admin_only),
                          accounts: AccountService = Depends(get_account_service)):
    user = await accounts.create_employee(current_user, body.name, body.email, body.password, body.position)
    return UserMessageResponse(message="Employee account created successfully.", user=UserResponse.from_document(user))


@router.get("/company/employees", response_model=UserListResponse)
async def company_employees(current_user: dict = Depends(admin_only),
                            accounts: AccountService = Depends(get_account_service)):
    return user_list(await accounts.list_employees(current_user))


@router.post("/approve/employee/{employee_id}", response_model=UserMessageResponse)
async def approve_employee(employee_id: str, current_user: dict = Depends(admin_only),
                           accounts: AccountService = Depends(get_account_service)):
    user = await accounts.approve_employee(current_user, employee_id)
    return UserMessageResponse(message="Employee approved successfully.", user=UserResponse.from_document(user))


@router.put("/update/employee/{employee_id}", response_model=UserMessageResponse)
async def update_employee(employee_id: str, body: EmployeeUpdate, current_user: dict = Depends(admin_only),
                          accounts: AccountService = Depends(get_account_service)):
    user = await accounts.update_employee(current_user, employee_id, body.model_dump(exclude_unset=True))
    return UserMessageResponse(message="Employee updated successfully", user=UserResponse.from_document(user))


@router.delete("/delete/employee/{employee_id}", response_model=MessageResponse)
async def delete_employee(employee_id: str, current_user: dict = Depends(admin_only),
                          accounts: AccountService = Depends(get_account_service)):
    await accounts.delete_employee(current_user, employee_id)
    return {"message": "Employee deleted successfully"}


# ===========================
# SUPERADMIN ENDPOINTS
# ===========================

@router.post("/approve/company/{company_id}", response_model=MessageResponse)
async def approve_company(company_id: str, current_user: dict = Depends(superadmin_only),
                          accounts: AccountService = Depends(get_account_service)):
    await accounts.approve_company(current_user, company_id)
    return {"message": "Company approved successfully."}


@router.post("/reject/company/{company_id}", response_model=MessageResponse)
async def reject_company(company_id: str, current_user: dict = Depends(superadmin_only),
                         accounts: AccountService = Depends(get_account_service)):
    await accounts.reject_company(current_user, company_id)
    return {"message": "Company rejected."}


@router.get("/pending/companies", response_model=UserListResponse)
async def pending_companies(current_user: dict = Depends(superadmin_only),
                            accounts: AccountService = Depends(get_account_service)):
    return user_list(await accounts.list_companies(UserStatus.PENDING))


@router.get("/approved/companies", response_model=UserListResponse)
async def approved_companies(current_user: dict = Depends(superadmin_only),
                             accounts: AccountService = Depends(get_account_service)):
    return user_list(await accounts.list_companies(UserStatus.APPROVED))


@router.get("/admins", response_model=UserListResponse)
async def list_admins(current_user: dict = Depends(superadmin_only),
                      accounts: AccountService = Depends(get_account_service)):
    """All approved admins."""
    return user_list(await accounts.list_companies(UserStatus.APPROVED))


@router.put("/admins/{admin_id}", response_model=UserMessageResponse)
async def update_admin(admin_id: str, body: AdminUpdate, current_user: dict = Depends(superadmin_only),
                       accounts: AccountService = Depends(get_account_service)):
    user = await accounts.update_admin(admin_id, body.model_dump(exclude_unset=True))
    return UserMessageResponse(message="Admin updated successfully.", user=UserResponse.from_document(user))


@router.delete("/admins/{admin_id}", response_model=MessageResponse)
async def delete_admin(admin_id: str, current_user: dict = Depends(superadmin_only),
                       accounts: AccountService = Depends(get_account_service)):
    await accounts.delete_admin(admin_id)
    return {"message": "Admin deleted successfully."}


@router.get("/all", response_model=UserListResponse)
async def list_all_users(current_user: dict = Depends(superadmin_only),
                         accounts: AccountService = Depends(get_account_service)):
    """Approved users of every role except superadmin."""
    return user_list(await accounts.list_users())
