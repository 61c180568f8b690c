"""
MongoDB async connection using Motor.
Holds raw version content snapshots and the LLM call audit trail.
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

client: AsyncIOMotorClient = None
db: AsyncIOMotorDatabase = None


async def connect_mongo():
    """Initialize MongoDB connection."""
    global client, db
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.MONGODB_DB_NAME]
    logger.info("MongoDB connected", extra={"event": "db_connect", "db_name": settings.MONGODB_DB_NAME})


async def close_mongo():
    """Close MongoDB connection."""
    global client
    if client:
        client.close()
        logger.info("MongoDB connection closed", extra={"event": "db_disconnect"})


def get_mongo_db() -> AsyncIOMotorDatabase:
    """Get MongoDB database instance."""
    return db


# ── Collection accessors ──
def version_snapshots_collection():
    return db["version_snapshots"]


def llm_audit_collection():
    return db["llm_audit_log"]
