from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from webide.core.config import get_settings
from webide.core.errors import StoreError, store_error_handler
from webide.core.logging import setup_logging
from webide.api.routers import auth as r_auth
from webide.api.routers import ws as r_ws
from webide.api.routers import projects_api as r_projects
from webide.api.routers import files_api as r_files
from sqlalchemy import select
from webide.db.session import get_session
from webide.db.models import User
from webide.core.security import hash_password
import os

setup_logging()
settings = get_settings()

app = FastAPI(title=settings.APP_NAME)
app.add_middleware(
    CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
)
app.add_exception_handler(StoreError, store_error_handler)

app.include_router(r_auth.router, prefix=settings.API_PREFIX)
app.include_router(r_projects.router, prefix=settings.API_PREFIX)
app.include_router(r_files.router, prefix=settings.API_PREFIX)
app.include_router(r_ws.router, prefix=settings.API_PREFIX)


@app.get(f"{settings.API_PREFIX}/health")
async def health():
    return {"ok": True}


@app.on_event("startup")
async def ensure_admin():
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        return
    # create admin user if not exists
    async for session in get_session():
        exists = await session.execute(select(User).where(User.email == email))
        if exists.scalar_one_or_none():
            return
        u = User(email=email, password_hash=hash_password(password), is_admin=True)
        session.add(u)
        await session.commit()
        return
