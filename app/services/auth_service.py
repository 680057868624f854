import logging
from typing import Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from app.auth.jwt import create_access_token, get_password_hash, verify_password
from app.errors import AuthError, PersistenceError, ValidationError
from app.models.admin import Admin
from app.schemas.admin import (
    ActionResponse,
    AdminInfo,
    AdminProfile,
    EmailUpdateResponse,
    LoginResponse,
)

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    async def authenticate_admin(email: str, password: str) -> Optional[Admin]:
        """Authenticate an administrator with email and password"""
        try:
            admin = await Admin.find_one(Admin.email == email)
        except PyMongoError as e:
            logger.error(f"Admin lookup failed: {e}")
            raise PersistenceError() from e

        if not admin:
            return None

        if not verify_password(password, admin.passwordHash):
            return None

        return admin

    @staticmethod
    async def login_admin(email: Optional[str], password: Optional[str]) -> LoginResponse:
        """Login administrator and return a signed token"""
        if not email or not password:
            raise ValidationError("Missing credentials")

        admin = await AuthService.authenticate_admin(email.strip(), password)
        if not admin:
            raise AuthError("Invalid credentials")

        token = create_access_token(str(admin.id))
        logger.info(f"Admin {admin.id} logged in")
        return LoginResponse(token=token, admin=AdminInfo(email=admin.email, name=admin.name))

    @staticmethod
    def get_profile(admin: Admin) -> AdminProfile:
        return AdminProfile(email=admin.email, name=admin.name, createdAt=admin.createdAt)

    @staticmethod
    async def update_email(admin: Admin, new_email: str) -> EmailUpdateResponse:
        """Change the login email of the current administrator"""
        new_email = new_email.strip()
        if not new_email:
            raise ValidationError("Missing email")

        # Check if another admin already uses this email
        existing = await Admin.find_one(Admin.email == new_email)
        if existing and existing.id != admin.id:
            raise ValidationError("Email already in use")

        try:
            await admin.set({Admin.email: new_email})
        except DuplicateKeyError:
            raise ValidationError("Email already in use")

        logger.info(f"Admin {admin.id} changed login email")
        return EmailUpdateResponse(email=new_email)

    @staticmethod
    async def update_password(admin: Admin, old_password: str, new_password: str) -> ActionResponse:
        """Change the password after checking the current one"""
        if not verify_password(old_password, admin.passwordHash):
            raise AuthError("Invalid old password")

        await admin.set({Admin.passwordHash: get_password_hash(new_password)})
        logger.info(f"Admin {admin.id} changed password")
        return ActionResponse(message="Password updated")

    @staticmethod
    async def ensure_initial_admin(email: Optional[str], password: Optional[str]) -> Optional[Admin]:
        """Create the first administrator from configuration when none exists"""
        admin_count = await Admin.find_all().count()
        if admin_count > 0:
            logger.info("Admin user exists.")
            return None

        if not email or not password:
            logger.info(
                "No admin user found. To auto-create an admin on startup set "
                "ADMIN_EMAIL and ADMIN_PASS environment variables."
            )
            return None

        admin = Admin(email=email.strip(), passwordHash=get_password_hash(password), name="Admin")
        await admin.insert()
        # Email stays out of the log
        logger.info("Admin user created from ADMIN_EMAIL environment variable.")
        return admin
