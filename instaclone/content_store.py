"""
Per-user content partitions.

Every registered username owns one MongoDB collection, named by
``partition_name``. Collections are never created explicitly: MongoDB
creates one on its first insert, and concurrent implicit creation is a
no-op on the server side. In process, partitions are tracked by an
explicit registry so each derived name maps to exactly one handle.
"""
import re
import logging
from typing import Callable, Dict, List

from .core import get_db
from .models import ContentItem

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^a-z0-9]')


def partition_name(username: str) -> str:
    """Derive a collection name from a username.

    The mapping is lossy: "a-b" and "a_b" share one partition. Characters
    outside the BMP count as two UTF-16 code units, so an emoji becomes "__",
    matching the names of collections that already exist.
    """
    return _UNSAFE_CHARS.sub(_replacement, username.lower())


def _replacement(match):
    return '__' if ord(match.group()) > 0xFFFF else '_'


class Partition:
    """Handle on one user's content collection."""

    def __init__(self, name: str, db_factory: Callable):
        self.name = name
        self._db_factory = db_factory

    @property
    def collection(self):
        # resolved per call so a reconnect never leaves a stale handle behind
        return self._db_factory()[self.name]

    def __repr__(self):
        return f'Partition({self.name!r})'


class ContentStore:
    def __init__(self, db_factory: Callable = get_db):
        self._db_factory = db_factory
        self._partitions: Dict[str, Partition] = {}

    def get_or_create_partition(self, username: str) -> Partition:
        name = partition_name(username)
        partition = self._partitions.get(name)
        if partition is None:
            # setdefault keeps the first handle if two callers race here
            partition = self._partitions.setdefault(name, Partition(name, self._db_factory))
        return partition

    async def insert(self, partition: Partition, item: ContentItem) -> None:
        await partition.collection.insert_one(item.to_document())

    async def find_all(self, partition: Partition) -> List[ContentItem]:
        cursor = partition.collection.find({}, {'_id': 0})
        docs = await cursor.to_list(length=None)
        return [ContentItem.model_validate(doc) for doc in docs]

    async def delete_by_image_id(self, partition: Partition, image_id: str) -> int:
        result = await partition.collection.delete_one({'imageId': image_id})
        return result.deleted_count

    async def delete_older_than(self, partition: Partition, cutoff_ms: int) -> int:
        result = await partition.collection.delete_many({'timestamp': {'$lt': cutoff_ms}})
        if result.deleted_count:
            logger.info(f"Removed {result.deleted_count} expired items from {partition.name}")
        return result.deleted_count
