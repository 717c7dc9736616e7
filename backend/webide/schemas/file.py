from pydantic import BaseModel, ConfigDict
from datetime import datetime
from webide.db.enums import NodeType


class FileCreate(BaseModel):
    name: str
    type: NodeType = NodeType.file
    parent_id: str | None = None
    content: str | None = None


class FileContentIn(BaseModel):
    content: str


class FileMove(BaseModel):
    # an explicit `"parent_id": null` moves to the root; omitting it keeps
    # the current parent (see `model_fields_set`)
    name: str | None = None
    parent_id: str | None = None


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    parent_id: str | None = None
    type: NodeType
    name: str
    path: str
    size: int = 0
    language: str | None = None
    mime_type: str | None = None
    version: int = 1
    extension: str | None = None
    depth: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FileDetail(FileOut):
    content: str = ""


class TreeNodeOut(FileOut):
    children: list["TreeNodeOut"] = []


class SearchOut(BaseModel):
    files: list[FileOut]
    total_results: int


class DeleteOut(BaseModel):
    deleted: list[str]
