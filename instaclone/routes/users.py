import logging
from fastapi import APIRouter, Depends
from ..schemas.users import RegisterIn, ActionOkOut
from ..registry import IdentityRegistry, DuplicateUsernameError, ReservedUsernameError
from ..dependencies import get_registry
from ..metrics import REGISTRATIONS

logger = logging.getLogger(__name__)

router = APIRouter()

MISSING_FIELDS = 'Username and session ID required'


@router.post('/register', response_model=ActionOkOut, response_model_exclude_none=True)
async def register(payload: RegisterIn, registry: IdentityRegistry = Depends(get_registry)):
    if not payload.username or not payload.session_id:
        return ActionOkOut(success=False, message=MISSING_FIELDS)

    try:
        await registry.register(payload.username, payload.session_id)
    except DuplicateUsernameError:
        return ActionOkOut(success=False, message='Username already taken')
    except ReservedUsernameError:
        return ActionOkOut(success=False, message='Username not allowed')
    except Exception:
        logger.exception('Registration error')
        return ActionOkOut(success=False, message='Registration failed')

    REGISTRATIONS.inc()
    return ActionOkOut(message='Username registered successfully')
