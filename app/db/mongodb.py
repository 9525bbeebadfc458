"""
MongoDB Connection Utility

MongoDB is the only store. Collections:
- colleges, students, recruiters: owner profiles (one per user account)
- achievements, projects: student credentials awaiting college review
- opportunities, applications: recruiter postings and student applications
- skills: shared skill catalogue referenced by id

Uses motor so independent queries can be awaited together.
"""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, TEXT

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by motor/pymongo)
_client: AsyncIOMotorClient = None
_db: AsyncIOMotorDatabase = None


def get_mongo_client() -> AsyncIOMotorClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=5000,
        )
    return _client


def get_mongo_db() -> AsyncIOMotorDatabase:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


async def get_database() -> AsyncIOMotorDatabase:
    """
    FastAPI dependency - the database handle for a request.
    Overridden in tests with an in-memory mock.
    """
    return get_mongo_db()


async def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        await client.admin.command('ping')
        return True
    except Exception as e:
        logger.error(f"MongoDB connection failed: {e}")
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "colleges": "colleges",
    "students": "students",
    "recruiters": "recruiters",
    "opportunities": "opportunities",
    "applications": "applications",
    "achievements": "achievements",
    "projects": "projects",
    "skills": "skills",
}


async def init_mongo_indexes(db: AsyncIOMotorDatabase = None):
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = db if db is not None else get_mongo_db()

    # One profile per user account
    for owner in ("colleges", "students", "recruiters"):
        await db[COLLECTIONS[owner]].create_index("userId", unique=True)

    # Full text search for the college directory
    await db[COLLECTIONS["colleges"]].create_index([
        ("name", TEXT),
        ("code", TEXT),
        ("address.city", TEXT)
    ])

    # Roster lookups and dashboard counts
    await db[COLLECTIONS["students"]].create_index([
        ("collegeId", ASCENDING),
        ("enrollmentNumber", ASCENDING)
    ])
    await db[COLLECTIONS["students"]].create_index([
        ("collegeId", ASCENDING),
        ("isVerifiedByCollege", ASCENDING)
    ])

    # Pending queues
    for credential in ("achievements", "projects"):
        await db[COLLECTIONS[credential]].create_index([
            ("studentId", ASCENDING),
            ("verificationStatus", ASCENDING),
            ("createdAt", DESCENDING)
        ])
    await db[COLLECTIONS["achievements"]].create_index("verifiedBy")

    # Recruiter-side application listing
    await db[COLLECTIONS["opportunities"]].create_index("recruiterId")
    await db[COLLECTIONS["applications"]].create_index([
        ("opportunityId", ASCENDING),
        ("appliedAt", DESCENDING)
    ])
    await db[COLLECTIONS["applications"]].create_index([
        ("studentId", ASCENDING),
        ("opportunityId", ASCENDING)
    ])

    logger.info("MongoDB indexes created successfully")
