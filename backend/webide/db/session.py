from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from webide.core.config import get_settings

settings = get_settings()


def make_engine(url: str, **kwargs) -> AsyncEngine:
    eng = create_async_engine(url, future=True, echo=False, **kwargs)
    if eng.dialect.name == "sqlite":
        # SQLite ignores ON DELETE CASCADE unless asked per connection
        @event.listens_for(eng.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

    return eng


def make_sessionmaker(eng: AsyncEngine):
    return sessionmaker(
        bind=eng, autoflush=False, expire_on_commit=False, class_=AsyncSession
    )


engine = make_engine(settings.DATABASE_URL)
AsyncSessionLocal = make_sessionmaker(engine)


async def get_session():
    async with AsyncSessionLocal() as session:
        yield session
