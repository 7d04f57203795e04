from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field


def _utcnow():
    return datetime.now(timezone.utc)


class User(BaseModel):
    """A registry record in the namesdata collection."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    session_id: str = Field(alias='sessionId')
    created_at: datetime = Field(default_factory=_utcnow, alias='createdAt')

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)
