"""Storage capability for expenses: one collection, MongoDB or in-memory."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import PyMongoError

from models.expense import ExpenseCreate

logger = logging.getLogger(__name__)

COLLECTION_NAME = "expenses"

# Newest date first; same-day records newest insertion first
LIST_SORT = [("date", -1), ("createdAt", -1)]


class ExpenseStore:
    """
    Domain operations over a single Motor-compatible expenses collection.

    Routes and services only ever see this class. Whether the collection is
    a real MongoDB collection or a transient in-memory one is decided once by
    `connect_store` at startup.
    """

    def __init__(self, collection: AsyncIOMotorCollection, client: Any = None):
        self.collection = collection
        self._client = client

    @property
    def name(self) -> str:
        return self.collection.name

    async def find(self, filters: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        cursor = self.collection.find(filters or {}, sort=LIST_SORT)
        return await cursor.to_list(length=None)

    async def find_in_date_range(self, start: str, end: str) -> List[Dict[str, Any]]:
        cursor = self.collection.find({"date": {"$gte": start, "$lte": end}})
        return await cursor.to_list(length=None)

    async def insert(self, expense: ExpenseCreate) -> Dict[str, Any]:
        document = self._to_document(expense)
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    async def insert_many(self, expenses: List[ExpenseCreate]) -> int:
        if not expenses:
            return 0
        documents = [self._to_document(expense) for expense in expenses]
        result = await self.collection.insert_many(documents)
        return len(result.inserted_ids)

    async def count(self) -> int:
        return await self.collection.count_documents({})

    async def totals_by_category(self) -> List[Dict[str, Any]]:
        pipeline = [
            {"$group": {"_id": "$category", "total": {"$sum": "$amount"}, "count": {"$sum": 1}}},
            {"$sort": {"total": -1}},
        ]
        cursor = self.collection.aggregate(pipeline)
        return await cursor.to_list(length=None)

    def close(self):
        if self._client is not None:
            self._client.close()

    @staticmethod
    def _to_document(expense: ExpenseCreate) -> Dict[str, Any]:
        document = expense.model_dump()
        # Mongo keeps millisecond UTC precision; truncate so reads match what was returned on insert
        now = datetime.now(timezone.utc)
        document["createdAt"] = now.replace(microsecond=(now.microsecond // 1000) * 1000)
        return document


def create_memory_store(db_name: str) -> ExpenseStore:
    """Creates a transient in-memory store that lives as long as the process."""
    client = AsyncMongoMockClient()
    return ExpenseStore(client[db_name].get_collection(COLLECTION_NAME))


async def connect_store(uri: Optional[str], db_name: str, timeout_ms: int = 2000) -> ExpenseStore:
    """
    Connects to the configured MongoDB instance, falling back to an
    in-memory store when no URI is set or the server cannot be reached.
    """
    if not uri:
        logger.warning("MONGODB_URI not set. Using in-memory database instead.")
        return create_memory_store(db_name)

    logger.info("Connecting to MongoDB...")
    client = None
    try:
        client = AsyncIOMotorClient(uri, serverSelectionTimeoutMS=timeout_ms)
        await client.admin.command("ping")
    except (PyMongoError, ValueError) as e:
        logger.error(f"MongoDB connection error: {e}")
        logger.warning("Using in-memory database instead.")
        if client is not None:
            client.close()
        return create_memory_store(db_name)

    logger.info(f"Connected to MongoDB database: {db_name}")
    return ExpenseStore(client[db_name].get_collection(COLLECTION_NAME), client=client)
