import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient

from jobboard.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Owns the Motor client and exposes the users/jobs collections."""

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self.client = client
        self._injected = client is not None
        self.db = None

    async def connect(self):
        if self.client is None:
            if not self.settings.mongo_uri:
                raise ValueError("MONGO_URI environment variable is not set! Check your .env file.")
            self.client = AsyncIOMotorClient(self.settings.mongo_uri)

        self.db = self.client[self.settings.database_name]

        if not self._injected:
            await self.client.admin.command("ping")
            if "mongodb+srv" in self.settings.mongo_uri:
                logger.info("Connected to MongoDB Atlas (%s)", self.settings.database_name)
            else:
                logger.info("Connected to MongoDB at %s", self.settings.mongo_uri)

        await self.ensure_indexes()

    async def ensure_indexes(self):
        await self.users.create_index("email", unique=True)
        await self.jobs.create_index("posted_by")

    async def close(self):
        if self.client is not None and not self._injected:
            self.client.close()
            logger.info("MongoDB connection closed")

    @property
    def users(self):
        return self.db.users

    @property
    def jobs(self):
        return self.db.jobs


def to_object_id(value) -> Optional[ObjectId]:
    """Parse a path/claim identifier; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
