"""
Document store for feedback, reference models and learned adjustment factors
Backed by Redis hashes, with an in-process variant for local development
"""

import json
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import redis

from swingcoach.config.base import settings
from swingcoach.utils.logger import get_logger

logger = get_logger(__name__)

# Collection names
ANALYSIS_FEEDBACK = "analysis_feedback"
METRIC_FEEDBACK = "metric_feedback"
REFERENCE_MODELS = "reference_models"
SYSTEM = "system"

# Documents in the system collection
ADJUSTMENT_FACTORS_DOC = "adjustment_factors"
FEEDBACK_PROCESSING_DOC = "feedback_processing"


class DocumentStoreError(Exception):
    """The document store could not complete a read or write"""


class StoragePermissionError(DocumentStoreError):
    """The store rejected the operation for lack of permission"""


class DocumentStore(ABC):
    """Collections of JSON documents addressed by id"""

    @abstractmethod
    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        pass

    @abstractmethod
    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        """All documents of a collection, each with its id under "id" """
        pass

    async def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        """Append a new document under a generated id"""
        doc_id = uuid.uuid4().hex
        await self.set_document(collection, doc_id, data)
        return doc_id

    async def health_check(self) -> bool:
        return True


class MemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._collections: Dict[str, Dict[str, str]] = {}

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raw = self._collections.get(collection, {}).get(doc_id)
        return json.loads(raw) if raw else None

    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        docs = self._collections.setdefault(collection, {})
        if merge and doc_id in docs:
            merged = json.loads(docs[doc_id])
            merged.update(data)
            data = merged
        docs[doc_id] = json.dumps(data, default=str)

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        return [
            {**json.loads(raw), "id": doc_id}
            for doc_id, raw in self._collections.get(collection, {}).items()
        ]

    def clear(self):
        self._collections.clear()


class RedisDocumentStore(DocumentStore):
    """One Redis hash per collection, one JSON field per document"""

    def __init__(self, client: Optional[redis.Redis] = None, prefix: str = "swingcoach"):
        self.redis_client = client or redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=settings.REDIS_PASSWORD or None,
            db=settings.REDIS_DB,
            decode_responses=True,
        )
        self.prefix = prefix
        logger.info(f"Using Redis document store at {settings.REDIS_HOST}:{settings.REDIS_PORT}")

    def _key(self, collection: str) -> str:
        return f"{self.prefix}:{collection}"

    @staticmethod
    def _translate(e: redis.RedisError, action: str) -> DocumentStoreError:
        if isinstance(e, (redis.exceptions.AuthenticationError, redis.exceptions.NoPermissionError)):
            return StoragePermissionError(f"Permission denied during {action}: {e}")
        return DocumentStoreError(f"Redis {action} failed: {e}")

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            raw = self.redis_client.hget(self._key(collection), doc_id)
        except redis.RedisError as e:
            raise self._translate(e, f"GET {collection}/{doc_id}") from e
        return json.loads(raw) if raw else None

    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        try:
            if merge:
                existing = await self.get_document(collection, doc_id)
                if existing:
                    existing.update(data)
                    data = existing
            self.redis_client.hset(self._key(collection), doc_id, json.dumps(data, default=str))
        except redis.RedisError as e:
            raise self._translate(e, f"SET {collection}/{doc_id}") from e

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        try:
            raw_docs = self.redis_client.hgetall(self._key(collection))
        except redis.RedisError as e:
            raise self._translate(e, f"LIST {collection}") from e
        return [{**json.loads(raw), "id": doc_id} for doc_id, raw in raw_docs.items()]

    async def health_check(self) -> bool:
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False


def create_document_store() -> DocumentStore:
    if settings.USE_LOCAL_STORAGE:
        logger.info("Using in-memory document store")
        return MemoryDocumentStore()
    return RedisDocumentStore()


document_store = create_document_store()
