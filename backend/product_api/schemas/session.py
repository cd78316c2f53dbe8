from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CreateSessionInput(BaseModel):
    email: str = Field(..., min_length=1, json_schema_extra={"example": "jane.doe@example.com"})
    password: str = Field(..., min_length=1, json_schema_extra={"example": "stringPassword123"})


class CreateSessionResponse(BaseModel):
    accessToken: str
    refreshToken: str


class DeleteSessionResponse(BaseModel):
    accessToken: Optional[str] = None
    refreshToken: Optional[str] = None


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user: int = Field(validation_alias=AliasChoices("user_id", "user"))
    valid: bool
    userAgent: Optional[str] = Field(default=None, validation_alias=AliasChoices("userAgent", "user_agent"))
    createdAt: datetime = Field(validation_alias=AliasChoices("createdAt", "created_at"))
    updatedAt: datetime = Field(validation_alias=AliasChoices("updatedAt", "updated_at"))
