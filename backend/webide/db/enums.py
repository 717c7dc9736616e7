import enum


class NodeType(str, enum.Enum):
    file = "file"
    folder = "folder"
