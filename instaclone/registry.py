import logging
import re
from typing import Callable, List, Optional

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from .core import get_db, REGISTRY_COLLECTION
from .content_store import ContentStore, partition_name
from .models import User

logger = logging.getLogger(__name__)


class DuplicateUsernameError(Exception):
    pass


class ReservedUsernameError(Exception):
    pass


class IdentityRegistry:
    """Username <-> session id records kept in the namesdata collection."""

    def __init__(self, store: ContentStore, db_factory: Callable = get_db):
        self._store = store
        self._db_factory = db_factory

    @property
    def collection(self):
        return self._db_factory()[REGISTRY_COLLECTION]

    async def ensure_indexes(self):
        await self.collection.create_index([('username', ASCENDING)], unique=True)
        await self.collection.create_index([('sessionId', ASCENDING)])

    async def register(self, username: str, session_id: str) -> User:
        username = username.lower()
        partition = partition_name(username)
        if partition == REGISTRY_COLLECTION:
            raise ReservedUsernameError(username)

        if await self.collection.find_one({'username': username}):
            raise DuplicateUsernameError(username)

        user = User(username=username, session_id=session_id)
        try:
            await self.collection.insert_one(user.to_document())
        except DuplicateKeyError:
            # lost a race with a concurrent registration of the same name
            raise DuplicateUsernameError(username)

        await self._warn_on_shared_partition(username, partition)
        self._store.get_or_create_partition(username)
        return user

    async def resolve_by_session(self, session_id: str) -> Optional[User]:
        doc = await self.collection.find_one({'sessionId': session_id})
        if not doc:
            return None
        return User.model_validate(doc)

    async def list_users(self) -> List[User]:
        docs = await self.collection.find({}).to_list(length=None)
        return [User.model_validate(doc) for doc in docs]

    async def _warn_on_shared_partition(self, username: str, partition: str):
        # a run of '_' may stand for one or more non [a-z0-9] characters; the
        # regex narrows candidates and partition_name confirms them
        pattern = '^' + re.sub(r'_+', '[^a-z0-9]+', partition) + '$'
        try:
            docs = await self.collection.find(
                {'username': {'$regex': pattern, '$ne': username}}, {'username': 1}
            ).to_list(length=None)
            others = [doc['username'] for doc in docs if partition_name(doc['username']) == partition]
        except Exception as e:
            logger.warning(f"Partition collision check failed for {username}: {e}")
            return
        if others:
            logger.warning({
                'msg': 'partition_collision',
                'username': username,
                'partition': partition,
                'shared_with': others,
            })
