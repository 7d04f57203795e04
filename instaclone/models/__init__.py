from .users import User  # noqa: F401
from .content import ContentItem, ContentType  # noqa: F401
