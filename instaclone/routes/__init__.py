from fastapi import APIRouter
from . import users, content

router = APIRouter()
router.include_router(users.router, tags=['users'])
router.include_router(content.router, tags=['content'])

# What each JSON route answers when its body is absent, null or not an object
MISSING_BODY_MESSAGES = {
    '/register': users.MISSING_FIELDS,
    '/upload': content.MISSING_UPLOAD_FIELDS,
    '/delete': content.MISSING_DELETE_FIELDS,
}
