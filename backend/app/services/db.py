# async mongodb client for the backend api
# uses motor for non-blocking operations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.config import settings

logger = logging.getLogger(__name__)


class Database:
    """async mongodb connection manager"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """establish connection to mongodb"""
        if self.client is not None:
            return

        logger.info(f"Connecting to MongoDB database: {settings.MONGODB_DATABASE}")
        self.client = AsyncIOMotorClient(settings.MONGODB_URI)
        self.db = self.client[settings.MONGODB_DATABASE]

        # verify connection
        await self.client.admin.command("ping")
        await self.ensure_indexes()
        logger.info("MongoDB connection established")

    async def ensure_indexes(self):
        """indexes backing the ownership filter and list queries"""
        await self.users.create_index("email", unique=True)
        for collection in (self.patients, self.therapy_plans, self.progress_reports, self.clinical_ratings):
            await collection.create_index("therapist_id")
        for collection in (self.therapy_plans, self.progress_reports, self.clinical_ratings):
            await collection.create_index([("patient_id", 1), ("status", 1)])

    async def close(self):
        """close mongodb connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")

    def collection(self, name: str):
        """look up a collection by its attribute name"""
        return getattr(self, name)

    # collection accessors

    @property
    def users(self):
        return self.db["users"]

    @property
    def patients(self):
        return self.db["patients"]

    @property
    def therapy_plans(self):
        return self.db["therapy_plans"]

    @property
    def progress_reports(self):
        return self.db["progress_reports"]

    @property
    def clinical_ratings(self):
        return self.db["clinical_ratings"]


# singleton instance
db = Database()


async def get_db() -> Database:
    """dependency injection for database access"""
    return db
