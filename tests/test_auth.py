"""Tests for admin credentials, tokens and the auth dependency."""

from datetime import timedelta

import pytest
from bson import ObjectId
from fastapi.security import HTTPAuthorizationCredentials

from app.auth.jwt import (
    create_access_token,
    decode_access_token,
    get_current_admin,
    get_password_hash,
    verify_password,
)
from app.errors import AuthError, ValidationError
from app.models.admin import Admin
from app.services.auth_service import AuthService


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestPasswords:
    def test_hash_round_trip(self):
        hashed = get_password_hash("hunter22")

        assert hashed != "hunter22"
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)

    def test_malformed_hash_does_not_verify(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")


class TestTokens:
    def test_token_carries_admin_id(self):
        token = create_access_token("507f1f77bcf86cd799439011")

        assert decode_access_token(token) == "507f1f77bcf86cd799439011"

    def test_expired_token_rejected(self):
        token = create_access_token("507f1f77bcf86cd799439011", expires_delta=timedelta(seconds=-1))

        with pytest.raises(AuthError):
            decode_access_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthError):
            decode_access_token("not.a.token")

    async def test_current_admin_resolved(self, admin):
        resolved = await get_current_admin(_bearer(create_access_token(str(admin.id))))

        assert resolved.id == admin.id

    @pytest.mark.parametrize("admin_id", ["not-an-object-id", str(ObjectId())])
    async def test_unknown_admin_rejected(self, db, admin_id):
        with pytest.raises(AuthError) as exc_info:
            await get_current_admin(_bearer(create_access_token(admin_id)))

        assert exc_info.value.message == "Unauthorized"

    async def test_missing_credentials_rejected(self, db):
        with pytest.raises(AuthError):
            await get_current_admin(None)


class TestAuthService:
    async def test_login(self, admin):
        response = await AuthService.login_admin("admin@acme.io", "s3cret-pass")

        assert response.admin.email == "admin@acme.io"
        assert decode_access_token(response.token) == str(admin.id)

    async def test_login_wrong_password(self, admin):
        with pytest.raises(AuthError):
            await AuthService.login_admin("admin@acme.io", "wrong")

    async def test_login_unknown_email(self, admin):
        with pytest.raises(AuthError):
            await AuthService.login_admin("who@acme.io", "s3cret-pass")

    async def test_login_missing_fields(self, db):
        with pytest.raises(ValidationError):
            await AuthService.login_admin("admin@acme.io", None)

    async def test_update_email(self, admin):
        await AuthService.update_email(admin, "boss@acme.io")

        stored = await Admin.get(admin.id)
        assert stored.email == "boss@acme.io"

    async def test_update_email_taken_by_other_admin(self, admin):
        await Admin(email="other@acme.io", passwordHash=get_password_hash("x" * 8)).insert()

        with pytest.raises(ValidationError):
            await AuthService.update_email(admin, "other@acme.io")

    async def test_update_password_requires_current_password(self, admin):
        with pytest.raises(AuthError):
            await AuthService.update_password(admin, "wrong", "new-password")

        await AuthService.update_password(admin, "s3cret-pass", "new-password")

        stored = await Admin.get(admin.id)
        assert verify_password("new-password", stored.passwordHash)

    async def test_initial_admin_created_once(self, db):
        created = await AuthService.ensure_initial_admin("first@acme.io", "pw-123456")
        again = await AuthService.ensure_initial_admin("second@acme.io", "pw-123456")

        assert created is not None
        assert again is None
        assert await Admin.find_all().count() == 1

    async def test_initial_admin_needs_credentials(self, db):
        assert await AuthService.ensure_initial_admin("", "") is None
        assert await Admin.find_all().count() == 0
