import argparse
import asyncio
from sqlalchemy.ext.asyncio import AsyncEngine
from webide.db import session as db_session
from webide.db.models import Base


async def create_schema(engine: AsyncEngine, drop: bool = False):
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def main(drop: bool = False):
    await create_schema(db_session.engine, drop=drop)
    print("DB schema created (or already exists)")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the database schema.")
    parser.add_argument("--drop", action="store_true", help="drop all tables first")
    asyncio.run(main(parser.parse_args().drop))
