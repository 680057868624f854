import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from app.config import settings
from app.models.admin import Admin
from app.models.meeting import Meeting
from app.models.settings import AppSettings
from app.models.team_member import TeamMember

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [Admin, AppSettings, TeamMember, Meeting]

_client: Optional[AsyncIOMotorClient] = None


async def init_db(client: Optional[AsyncIOMotorClient] = None):
    """Initialize database connection and Beanie models"""
    global _client
    try:
        if client is None:
            logger.info(f"Connecting to MongoDB database '{settings.DATABASE_NAME}'")
            client = AsyncIOMotorClient(settings.MONGODB_URL)

            # Test connection
            await client.admin.command('ping')
            logger.info("MongoDB connection successful")

        # Initialize Beanie with the document models
        await init_beanie(
            database=client[settings.DATABASE_NAME],
            document_models=DOCUMENT_MODELS
        )
        _client = client
        logger.info("Beanie models initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise


async def ping_db() -> bool:
    """True when the connected database answers a ping"""
    if _client is None:
        return False
    try:
        await _client.admin.command('ping')
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False
    return True


async def close_db():
    """Close database connection"""
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("MongoDB connection closed")
