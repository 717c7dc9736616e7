# backend/webide/api/deps.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from webide.core.errors import NotFound
from webide.core.security import decode_token
from webide.db.session import get_session
from webide.db.models import User, Project
from webide.services.access import authorize_project
from webide.store.nodes import NodeStore

bearer = HTTPBearer(auto_error=False)


async def get_db() -> AsyncSession:
    async for s in get_session():
        yield s


async def get_store(db: AsyncSession = Depends(get_db)) -> NodeStore:
    return NodeStore(db)


async def _user_from_token(db: AsyncSession, token: str) -> User | None:
    try:
        user_id = decode_token(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        )
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalar_one_or_none()


async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
):
    if not creds:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token"
        )
    user = await _user_from_token(db, creds.credentials)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def get_optional_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
):
    """Like `get_current_user`, but anonymous readers of public projects pass."""
    if not creds:
        return None
    return await _user_from_token(db, creds.credentials)


async def load_project(
    db: AsyncSession, pid: str, user_id: str | None, write: bool = False
) -> Project:
    p = await db.get(Project, pid)
    if not p:
        raise NotFound("project not found")
    authorize_project(p, user_id, write=write)
    return p
