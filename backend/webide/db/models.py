from sqlalchemy.orm import declarative_base, Mapped, mapped_column, relationship
from sqlalchemy import (
    Text,
    String,
    Integer,
    BigInteger,
    ForeignKey,
    TIMESTAMP,
    func,
    Boolean,
    UniqueConstraint,
    Index,
)
from uuid import uuid4
from webide.db.enums import NodeType

Base = declarative_base()


def gen_id():
    return str(uuid4())


class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_id)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    created_at: Mapped[str] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    projects: Mapped[list["Project"]] = relationship(
        back_populates="owner", cascade="all,delete"
    )


class Project(Base):
    __tablename__ = "projects"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_id)
    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text, default="", server_default="")
    is_public: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", index=True
    )
    is_archived: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", index=True
    )
    archived_at: Mapped[str | None] = mapped_column(TIMESTAMP(timezone=True))
    # aggregates maintained by services.stats
    total_files: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    total_size: Mapped[int] = mapped_column(BigInteger, default=0, server_default="0")
    last_modified: Mapped[str | None] = mapped_column(TIMESTAMP(timezone=True))
    created_at: Mapped[str] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[str] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    owner: Mapped[User] = relationship(back_populates="projects")
    files: Mapped[list["File"]] = relationship(
        back_populates="project", cascade="all,delete-orphan", passive_deletes=True
    )


class File(Base):
    """A file or folder node of a project tree.

    ``path`` is derived from the ``parent_id`` chain and is rewritten by the
    node store whenever a node or one of its ancestors is renamed or moved.
    """

    __tablename__ = "files"
    __table_args__ = (
        UniqueConstraint("project_id", "path", name="uq_files_project_path"),
        UniqueConstraint(
            "project_id", "parent_id", "name", name="uq_files_project_parent_name"
        ),
        Index("ix_files_project_parent", "project_id", "parent_id"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_id)
    project_id: Mapped[str] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), index=True
    )
    parent_id: Mapped[str | None] = mapped_column(
        ForeignKey("files.id", ondelete="CASCADE"), default=None
    )
    type: Mapped[str] = mapped_column(String(16), default=NodeType.file.value)
    name: Mapped[str] = mapped_column(String(255))
    path: Mapped[str] = mapped_column(String(1024))
    content: Mapped[str] = mapped_column(Text, default="")
    size: Mapped[int] = mapped_column(BigInteger, default=0)
    language: Mapped[str | None] = mapped_column(String(32), default=None)
    mime_type: Mapped[str | None] = mapped_column(String(255), default=None)
    version: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[str] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[str] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    project: Mapped[Project] = relationship(back_populates="files")

    @property
    def is_folder(self) -> bool:
        return self.type == NodeType.folder.value

    @property
    def extension(self) -> str | None:
        if self.is_folder or "." not in self.name:
            return None
        return self.name.rsplit(".", 1)[1].lower()

    @property
    def depth(self) -> int:
        return self.path.count("/")
