from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    is_public: bool = False


class ProjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_public: bool | None = None


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    description: str = ""
    is_public: bool = False
    is_archived: bool = False
    archived_at: datetime | None = None
    total_files: int = 0
    total_size: int = 0
    last_modified: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
