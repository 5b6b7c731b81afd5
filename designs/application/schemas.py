from pydantic import BaseModel, AliasChoices, Field
from datetime import datetime
from typing import Any

MAX_IMAGES = 3

class DesignPayload(BaseModel):
    """Raw create body. Fields are loosely typed on purpose; sanitize_design_input does the checking."""
    name: Any = None
    type: Any = None
    images: Any = None

class NewDesign(BaseModel):
    """A create request that passed validation."""
    name: str = Field(min_length=1)
    type: str = ""
    images: list[str] = Field(min_length=1, max_length=MAX_IMAGES)

class DesignRead(BaseModel):
    id: str = Field(validation_alias=AliasChoices("design_id", "id"))
    name: str
    type: str = ""
    images: list[str]
    created_at: datetime = Field(validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt")
    updated_at: datetime = Field(validation_alias=AliasChoices("updated_at", "updatedAt"), serialization_alias="updatedAt")

    class Config:
        from_attributes = True

class DesignDeleted(BaseModel):
    deleted: bool = True
