from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    POST = 'post'
    STORY = 'story'


class ContentItem(BaseModel):
    """A post or story stored in its owner's partition."""

    model_config = ConfigDict(populate_by_name=True)

    image_id: str = Field(alias='imageId')
    image: str
    # kept as plain str on read so legacy documents never break a listing
    type: str
    timestamp: int
    session_id: Optional[str] = Field(default=None, alias='sessionId')
    username: Optional[str] = None

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
