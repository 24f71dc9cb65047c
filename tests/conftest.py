"""
Shared fixtures for the ladder test suite.

Each test gets its own file-backed SQLite database under tmp_path so sessions
opened by different operations see the same data.
"""

import itertools

import pytest
from sqlalchemy import select, func

from ladder.database.database import Database
from ladder.database.models import Round
from ladder.operations import MatchLedger, PlayerOperations, RoundLifecycle
from ladder.services import LadderQueryService


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'ladder_test.db'}")
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def player_ops(database):
    return PlayerOperations(database)


@pytest.fixture
def lifecycle(database):
    return RoundLifecycle(database, max_rounds=8, starting_elo=1250)


@pytest.fixture
def ledger(database, lifecycle):
    return MatchLedger(database, lifecycle)


@pytest.fixture
def queries(database):
    return LadderQueryService(database.session_factory)


@pytest.fixture
def register(player_ops):
    """Register players with unique external ids"""
    external_ids = itertools.count(1001)

    async def _register(name, rating=None):
        return await player_ops.register_player(next(external_ids), name, rating)

    return _register


@pytest.fixture
def count_rounds(database):
    """Number of Round rows ever persisted"""
    async def _count():
        async with database.get_session() as session:
            return await session.scalar(select(func.count(Round.id)))

    return _count
