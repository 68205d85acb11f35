"""
Account lifecycle: registration paths, email verification, approval, login
and the scoped mutation of employees (by their company) and admins (by a
superadmin).

Employees and admins outside the caller's reach are reported as NotFound,
exactly like ids that do not exist.
"""
import logging
from typing import List, Optional, Tuple

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from jobboard.config import Settings
from jobboard.database import Database, to_object_id
from jobboard.errors import (
    AccountNotApproved,
    AlreadyExists,
    EmailNotVerified,
    InvalidCredentials,
    NotFound,
    Unauthenticated,
)
from jobboard.models.user import Role, User, UserStatus, normalize_email
from jobboard.utils.email import Mailer
from jobboard.utils.security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)

NO_PASSWORD = {"password": 0}


class AccountService:

    def __init__(
        self,
        db: Database,
        tokens: TokenService,
        hasher: PasswordHasher,
        mailer: Mailer,
        settings: Settings,
    ):
        self.db = db
        self.tokens = tokens
        self.hasher = hasher
        self.mailer = mailer
        self.settings = settings

    # ===========================
    # HELPERS
    # ===========================

    def verification_link(self, email_token: str) -> str:
        return f"{self.settings.public_base_url.rstrip('/')}/api/verify-email/{email_token}"

    async def _insert(self, user: User) -> dict:
        if await self.db.users.find_one({"email": user.email}):
            raise AlreadyExists()

        document = user.to_document()
        try:
            result = await self.db.users.insert_one(document)
        except DuplicateKeyError:
            raise AlreadyExists()

        document["_id"] = result.inserted_id
        logger.info("Created %s account %s (status=%s)", document["role"], document["_id"], document["status"])
        return document

    def _send_verification(self, user: dict) -> str:
        link = self.verification_link(self.tokens.create_email_token(user["_id"]))
        self.mailer.send_verification_email(user, link)
        return link

    async def _set_fields(self, query: dict, changes: dict) -> dict:
        if not changes:
            user = await self.db.users.find_one(query, NO_PASSWORD)
        else:
            user = await self.db.users.find_one_and_update(
                query,
                {"$set": changes},
                projection=NO_PASSWORD,
                return_document=ReturnDocument.AFTER,
            )
        if user is None:
            raise NotFound()
        return user

    # ===========================
    # REGISTRATION
    # ===========================

    async def register_company(self, name: str, email: str, password: str) -> Tuple[dict, str]:
        user = await self._insert(User.new(Role.ADMIN, name, email, self.hasher.hash(password)))
        return user, self._send_verification(user)

    async def register_candidate(self, name: str, email: str, password: str) -> Tuple[dict, str]:
        user = await self._insert(User.new(Role.CANDIDATE, name, email, self.hasher.hash(password)))
        return user, self._send_verification(user)

    async def register_employee(self, admin: dict, name: str, email: str, password: str) -> Tuple[dict, str]:
        """Pending employee of the admin's company; needs verification and approval."""
        user = await self._insert(
            User.new(Role.EMPLOYEE, name, email, self.hasher.hash(password), company_id=admin["_id"])
        )
        return user, self._send_verification(user)

    async def create_employee(self, admin: dict, name: str, email: str, password: str, position: str) -> dict:
        """Employee that is usable immediately: approved and verified."""
        return await self._insert(
            User.new(
                Role.EMPLOYEE, name, email, self.hasher.hash(password),
                status=UserStatus.APPROVED,
                email_verified=True,
                company_id=admin["_id"],
                position=position.strip(),
                approved_by=admin["_id"],
            )
        )

    async def bootstrap_superadmin(self, name: str, email: str, password: str) -> dict:
        try:
            return await self._insert(User.new(Role.SUPERADMIN, name, email, self.hasher.hash(password)))
        except AlreadyExists:
            raise AlreadyExists("Superadmin already exists with this email")

    async def verify_email(self, email_token: str) -> dict:
        payload = self.tokens.decode_email_token(email_token)
        user_id = to_object_id(payload.get("userId"))
        if user_id is None:
            raise Unauthenticated("Invalid token")
        try:
            user = await self._set_fields({"_id": user_id}, {"email_verified": True})
        except NotFound:
            raise Unauthenticated("Invalid token")
        logger.info("Email verified for user %s", user_id)
        return user

    # ===========================
    # LOGIN
    # ===========================

    async def login(self, email: str, password: str) -> Tuple[str, dict]:
        user = await self.db.users.find_one({"email": normalize_email(email)})
        if not user or not self.hasher.verify(password, user["password"]):
            logger.info("Failed login for %s", normalize_email(email))
            raise InvalidCredentials()

        if not user.get("email_verified"):
            raise EmailNotVerified(
                "Please verify your email before logging in.",
                email_verified=False,
                email_verification_link=self.verification_link(self.tokens.create_email_token(user["_id"])),
            )

        if user.get("status") != UserStatus.APPROVED.value:
            if user["role"] == Role.ADMIN.value:
                message = "Your company registration is pending Super Admin approval."
                if user["status"] == UserStatus.REJECTED.value:
                    message = "Your company registration was rejected."
            else:
                message = "Your account is pending approval."
            raise AccountNotApproved(message, status=user["status"])

        token = self.tokens.create_session_token(user)
        user.pop("password", None)
        return token, user

    # ===========================
    # APPROVAL
    # ===========================

    async def _set_company_status(self, superadmin: dict, company_id: str, status: UserStatus):
        company_oid = to_object_id(company_id)
        if company_oid is None:
            raise NotFound("Company not found")

        changes = {"status": status.value}
        if status is UserStatus.APPROVED:
            changes["approved_by"] = superadmin["_id"]

        result = await self.db.users.update_one(
            {"_id": company_oid, "role": Role.ADMIN.value}, {"$set": changes}
        )
        if result.matched_count == 0:
            raise NotFound("Company not found")
        logger.info("Company %s set to %s by %s", company_oid, status.value, superadmin["_id"])

    async def approve_company(self, superadmin: dict, company_id: str):
        await self._set_company_status(superadmin, company_id, UserStatus.APPROVED)

    async def reject_company(self, superadmin: dict, company_id: str):
        await self._set_company_status(superadmin, company_id, UserStatus.REJECTED)

    async def approve_employee(self, admin: dict, employee_id: str) -> dict:
        employee_oid = to_object_id(employee_id)
        if employee_oid is None:
            raise NotFound("Employee not found or not part of your company.")
        try:
            return await self._set_fields(
                {"_id": employee_oid, "role": Role.EMPLOYEE.value, "company_id": admin["_id"]},
                {"status": UserStatus.APPROVED.value, "approved_by": admin["_id"]},
            )
        except NotFound:
            raise NotFound("Employee not found or not part of your company.")

    # ===========================
    # LISTINGS
    # ===========================

    async def list_companies(self, status: UserStatus) -> List[dict]:
        return await self.db.users.find(
            {"role": Role.ADMIN.value, "status": status.value}, NO_PASSWORD
        ).to_list(None)

    async def list_users(self) -> List[dict]:
        """Approved users of every role except superadmin."""
        return await self.db.users.find(
            {"role": {"$ne": Role.SUPERADMIN.value}, "status": UserStatus.APPROVED.value}, NO_PASSWORD
        ).to_list(None)

    async def list_employees(self, admin: dict) -> List[dict]:
        return await self.db.users.find(
            {"role": Role.EMPLOYEE.value, "company_id": admin["_id"]}, NO_PASSWORD
        ).to_list(None)

    # ===========================
    # EMPLOYEE / ADMIN MUTATION
    # ===========================

    def _hash_changes(self, changes: dict) -> dict:
        changes = {k: v for k, v in changes.items() if v not in (None, "")}
        if "password" in changes:
            changes["password"] = self.hasher.hash(changes["password"])
        return changes

    def _employee_query(self, admin: dict, employee_id: str) -> Optional[dict]:
        employee_oid = to_object_id(employee_id)
        if employee_oid is None:
            return None
        return {"_id": employee_oid, "role": Role.EMPLOYEE.value, "company_id": admin["_id"]}

    def _admin_query(self, admin_id: str) -> Optional[dict]:
        admin_oid = to_object_id(admin_id)
        if admin_oid is None:
            return None
        return {"_id": admin_oid, "role": Role.ADMIN.value}

    async def update_employee(self, admin: dict, employee_id: str, changes: dict) -> dict:
        query = self._employee_query(admin, employee_id)
        if query is None:
            raise NotFound("Employee not found or not part of your company.")
        try:
            return await self._set_fields(query, self._hash_changes(changes))
        except NotFound:
            raise NotFound("Employee not found or not part of your company.")

    async def delete_employee(self, admin: dict, employee_id: str):
        query = self._employee_query(admin, employee_id)
        deleted = await self.db.users.find_one_and_delete(query) if query else None
        if deleted is None:
            raise NotFound("Employee not found or not part of your company.")
        logger.info("Employee %s deleted by %s", deleted["_id"], admin["_id"])

    async def update_admin(self, admin_id: str, changes: dict) -> dict:
        query = self._admin_query(admin_id)
        if query is None:
            raise NotFound("Admin not found.")

        changes = self._hash_changes(changes)
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
            taken = await self.db.users.find_one({"email": changes["email"], "_id": {"$ne": query["_id"]}})
            if taken:
                raise AlreadyExists()

        try:
            return await self._set_fields(query, changes)
        except NotFound:
            raise NotFound("Admin not found.")
        except DuplicateKeyError:
            raise AlreadyExists()

    async def delete_admin(self, admin_id: str):
        query = self._admin_query(admin_id)
        deleted = await self.db.users.find_one_and_delete(query) if query else None
        if deleted is None:
            raise NotFound("Admin not found or already deleted.")
        logger.info("Admin %s deleted", deleted["_id"])
