import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo.errors import PyMongoError

from app.config import settings
from app.errors import PersistenceError
from app.models.settings import SETTINGS_KEY, AppSettings
from app.schemas.settings import EmailTransportView, SettingsResponse, SettingsUpdate

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("defaultDurationMinutes", "sendInvites")


class SettingsService:
    """Singleton settings document.

    Creation goes through an upsert on the unique ``key`` so concurrent first
    reads cannot produce two documents.
    """

    @staticmethod
    def _defaults() -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        return {
            "adminEmail": settings.ADMIN_EMAIL or None,
            "defaultDurationMinutes": settings.DEFAULT_MEETING_DURATION,
            "sendInvites": True,
            "emailTransport": None,
            "createdAt": now,
            "updatedAt": now,
        }

    @staticmethod
    async def _upsert(set_fields: Dict[str, Any]) -> AppSettings:
        on_insert = {
            key: value for key, value in SettingsService._defaults().items()
            if key not in set_fields
        }
        on_insert["key"] = SETTINGS_KEY
        update: Dict[str, Any] = {"$setOnInsert": on_insert}
        if set_fields:
            update["$set"] = set_fields

        try:
            await AppSettings.get_motor_collection().update_one(
                {"key": SETTINGS_KEY}, update, upsert=True
            )
            document = await AppSettings.find_one(AppSettings.key == SETTINGS_KEY)
        except PyMongoError as e:
            logger.error(f"Settings store unavailable: {e}")
            raise PersistenceError() from e

        if document is None:
            raise PersistenceError("Settings document could not be created")
        return document

    @staticmethod
    async def get_settings() -> AppSettings:
        """Get the settings document, creating it with defaults if absent"""
        return await SettingsService._upsert({})

    @staticmethod
    async def update_settings(update: SettingsUpdate) -> AppSettings:
        """Apply the provided fields; omitted fields keep their stored values"""
        changes = update.model_dump(exclude_unset=True)
        # An explicit null on a required field means "leave as is"
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                del changes[field]

        transport = changes.get("emailTransport")
        if transport is not None and transport.get("password") is None:
            # Admin UIs never receive the password back, so keep the stored one
            current = await SettingsService.get_settings()
            if current.emailTransport and current.emailTransport.password:
                transport["password"] = current.emailTransport.password

        changes["updatedAt"] = datetime.now(timezone.utc)
        document = await SettingsService._upsert(changes)
        logger.info(f"Settings updated: {sorted(k for k in changes if k != 'updatedAt')}")
        return document

    @staticmethod
    async def sync_admin_email(admin_email: Optional[str]) -> AppSettings:
        """Ensure settings exist and carry the configured admin email"""
        document = await SettingsService.get_settings()
        if admin_email and document.adminEmail != admin_email:
            document = await SettingsService._upsert({
                "adminEmail": admin_email,
                "updatedAt": datetime.now(timezone.utc),
            })
            logger.info("Settings adminEmail updated from environment")
        return document

    @staticmethod
    def to_response(document: AppSettings) -> SettingsResponse:
        transport = None
        if document.emailTransport is not None:
            stored = document.emailTransport
            transport = EmailTransportView(
                service=stored.service,
                host=stored.host,
                port=stored.port,
                secure=stored.secure,
                user=stored.user,
                fromAddress=stored.fromAddress,
                hasPassword=bool(stored.password),
            )
        return SettingsResponse(
            adminEmail=document.adminEmail,
            defaultDurationMinutes=document.defaultDurationMinutes,
            sendInvites=document.sendInvites,
            emailTransport=transport,
            createdAt=document.createdAt,
            updatedAt=document.updatedAt,
        )
