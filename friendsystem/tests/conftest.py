import uuid
import pytest
import pytest_asyncio

from friendsystem.config import DatabaseSettings
from friendsystem.coordinator import FriendCoordinator
from friendsystem.database import create_engine, create_schema, create_session_factory


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite so every transaction gets its own connection."""
    settings = DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'friends.db'}")
    engine = create_engine(settings)
    await create_schema(engine)
    yield engine
    await engine.dispose()

@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)

@pytest.fixture
def coordinator(session_factory):
    return FriendCoordinator(session_factory)

@pytest.fixture
def alice():
    return uuid.uuid4()

@pytest.fixture
def bob():
    return uuid.uuid4()

@pytest.fixture
def carol():
    return uuid.uuid4()
