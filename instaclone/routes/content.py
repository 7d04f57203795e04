"""
Content Routes
Upload, list and delete posts and stories. Every route answers 200 with a
success flag; failures never map to error status codes.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..content_store import ContentStore
from ..dependencies import get_registry, get_content_store
from ..metrics import UPLOADS, DELETIONS
from ..models import ContentItem, ContentType
from ..registry import IdentityRegistry
from ..schemas.content import UploadIn, DeleteIn, ContentOut, ContentListOut
from ..schemas.users import ActionOkOut
from ..sweeper import sweep_expired_content

logger = logging.getLogger(__name__)

router = APIRouter()

CONTENT_TYPES = {t.value for t in ContentType}

MISSING_UPLOAD_FIELDS = 'Missing required fields'
MISSING_DELETE_FIELDS = 'Session ID and image ID required'


@router.post('/upload', response_model=ActionOkOut, response_model_exclude_none=True)
async def upload(
    payload: UploadIn,
    registry: IdentityRegistry = Depends(get_registry),
    store: ContentStore = Depends(get_content_store)
):
    required = (payload.session_id, payload.image_id, payload.image, payload.type, payload.timestamp)
    if not all(required):
        return ActionOkOut(success=False, message=MISSING_UPLOAD_FIELDS)
    if payload.type not in CONTENT_TYPES:
        return ActionOkOut(success=False, message='Type must be post or story')

    try:
        user = await registry.resolve_by_session(payload.session_id)
        if not user:
            return ActionOkOut(success=False, message='User not found')

        partition = store.get_or_create_partition(user.username)
        await store.insert(partition, ContentItem(
            image_id=payload.image_id,
            image=payload.image,
            type=payload.type,
            timestamp=payload.timestamp,
            session_id=payload.session_id,
            username=user.username,
        ))
    except Exception:
        logger.exception('Upload error')
        return ActionOkOut(success=False, message='Upload failed')

    UPLOADS.labels(type=payload.type).inc()
    return ActionOkOut(message='Content uploaded successfully')


@router.get('/content', response_model=ContentListOut, response_model_exclude_none=True)
async def list_content(
    registry: IdentityRegistry = Depends(get_registry),
    store: ContentStore = Depends(get_content_store)
):
    try:
        # expired items must never show up, even right before the hourly sweep
        await sweep_expired_content(registry, store)
        users = await registry.list_users()
    except Exception:
        logger.exception('Error fetching content')
        return ContentListOut(success=False, message='Failed to fetch content')

    posts, stories = [], []
    seen = set()
    for user in users:
        partition = store.get_or_create_partition(user.username)
        if partition.name in seen:
            continue
        seen.add(partition.name)
        try:
            items = await store.find_all(partition)
        except Exception:
            logger.exception(f'Error fetching content for {user.username}')
            continue

        for item in items:
            entry = ContentOut.from_item(item, username=item.username or user.username)
            if item.type == ContentType.POST.value:
                posts.append(entry)
            elif item.type == ContentType.STORY.value:
                stories.append(entry)

    posts.sort(key=lambda c: c.timestamp, reverse=True)
    stories.sort(key=lambda c: c.timestamp, reverse=True)
    return ContentListOut(posts=posts, stories=stories)


@router.get('/user-posts', response_model=ContentListOut, response_model_exclude_none=True)
async def user_posts(
    session_id: Optional[str] = Query(default=None, alias='sessionId'),
    registry: IdentityRegistry = Depends(get_registry),
    store: ContentStore = Depends(get_content_store)
):
    if not session_id:
        return ContentListOut(success=False, message='Session ID required')

    try:
        user = await registry.resolve_by_session(session_id)
        if not user:
            return ContentListOut(success=False, message='User not found')

        items = await store.find_all(store.get_or_create_partition(user.username))
    except Exception:
        logger.exception('Error fetching user posts')
        return ContentListOut(success=False, message='Failed to fetch posts')

    return ContentListOut(posts=[ContentOut.from_item(item) for item in items])


@router.post('/delete', response_model=ActionOkOut, response_model_exclude_none=True)
async def delete(
    payload: DeleteIn,
    registry: IdentityRegistry = Depends(get_registry),
    store: ContentStore = Depends(get_content_store)
):
    if not payload.session_id or not payload.image_id:
        return ActionOkOut(success=False, message=MISSING_DELETE_FIELDS)

    try:
        user = await registry.resolve_by_session(payload.session_id)
        if not user:
            return ActionOkOut(success=False, message='User not found')

        partition = store.get_or_create_partition(user.username)
        deleted = await store.delete_by_image_id(partition, payload.image_id)
    except Exception:
        logger.exception('Error deleting content')
        return ActionOkOut(success=False, message='Failed to delete content')

    if deleted:
        DELETIONS.inc(deleted)
    else:
        logger.debug(f'No item {payload.image_id} in partition {partition.name}')
    return ActionOkOut(message='Content deleted successfully')
