import pytest_asyncio

from infrastructure.persistence.database import Database


@pytest_asyncio.fixture
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'rates.db'}")
    await database.create_tables()
    yield database
    await database.drop_tables()
    await database.close()
