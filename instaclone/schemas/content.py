from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from ..models import ContentItem


# Request fields are all optional: presence is checked in the route so a
# missing field gets a success:false body instead of a 422.
class UploadIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias='sessionId')
    image_id: Optional[str] = Field(default=None, alias='imageId')
    image: Optional[str] = None
    type: Optional[str] = None
    timestamp: Optional[int] = None


class DeleteIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias='sessionId')
    image_id: Optional[str] = Field(default=None, alias='imageId')


class ContentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_id: str = Field(alias='imageId')
    image: str
    type: str
    timestamp: int
    username: Optional[str] = None

    @classmethod
    def from_item(cls, item: ContentItem, username: Optional[str] = None):
        return cls(
            image_id=item.image_id,
            image=item.image,
            type=item.type,
            timestamp=item.timestamp,
            username=username,
        )


class ContentListOut(BaseModel):
    success: bool = True
    message: Optional[str] = None
    posts: Optional[List[ContentOut]] = None
    stories: Optional[List[ContentOut]] = None
