"""
User-related Pydantic models
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """Read shape of a stored user"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    name: str
    email: str
    created_at: datetime = Field(alias="createdAt")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class UserCreate(BaseModel):
    """Write shape: fields the client supplies on creation"""
    name: str
    email: str


class UserDelete(BaseModel):
    id: int


class DeleteResult(BaseModel):
    success: bool = True
