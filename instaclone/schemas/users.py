from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class RegisterIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: Optional[str] = None
    session_id: Optional[str] = Field(default=None, alias='sessionId')


class ActionOkOut(BaseModel):
    success: bool = True
    message: Optional[str] = None
