from typing import Optional, List
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import event, select
from contextlib import asynccontextmanager

from ladder.config import Config
from ladder.database.models import Base, Player, Round, LeagueState
from ladder.utils.logger import setup_logger


def to_async_url(database_url: str) -> str:
    """Convert a sync sqlite URL to its aiosqlite equivalent"""
    if database_url.startswith('sqlite:///'):
        return database_url.replace('sqlite:///', 'sqlite+aiosqlite:///', 1)
    return database_url


class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = to_async_url(database_url or Config.DATABASE_URL)
        self.engine = None
        self.async_session = None

    @property
    def session_factory(self):
        return self.async_session

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        self.engine = create_async_engine(
            self.database_url,
            echo=Config.DEBUG,
            future=True
        )
        if self.database_url.startswith("sqlite"):
            self._use_immediate_transactions()

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

        await self.initialize_default_data()

    async def initialize_default_data(self):
        """Create the league state row if it does not exist yet"""
        async with self.transaction() as session:
            state = await session.get(LeagueState, LeagueState.SINGLETON_ID)
            if state is None:
                session.add(LeagueState(id=LeagueState.SINGLETON_ID))
                self.logger.info("Created league state row")

    def _use_immediate_transactions(self):
        """
        Start every SQLite transaction with BEGIN IMMEDIATE.

        The driver's deferred BEGIN lets two writers read the same rows before
        either takes the write lock, so concurrent ledger calls could each
        apply a delta to a stale rating. IMMEDIATE takes the write lock up
        front; the second writer waits on the busy timeout instead.
        """
        @event.listens_for(self.engine.sync_engine, "connect")
        def do_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(self.engine.sync_engine, "begin")
        def do_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    @asynccontextmanager
    async def get_session(self):
        """Get a database session for reads; callers commit explicitly"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context are committed together on success,
        or rolled back together on failure.

        Usage:
            async with db.transaction() as session:
                await db.lock_league_state(session)
                session.add(...)
                # Everything commits together here

        Exceptions must be allowed to propagate out of the context for
        rollback to occur.
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # ============================================================================
    # League state pointer
    # ============================================================================

    async def lock_league_state(self, session: AsyncSession) -> LeagueState:
        """
        Fetch the league state row with a write lock (session-aware).

        NOTE: On SQLite, with_for_update() is a no-op; the write lock taken by
        BEGIN IMMEDIATE serializes the transaction instead.
        """
        result = await session.execute(
            select(LeagueState)
            .where(LeagueState.id == LeagueState.SINGLETON_ID)
            .with_for_update()
        )
        state = result.scalar_one_or_none()
        if state is None:
            state = LeagueState(id=LeagueState.SINGLETON_ID)
            session.add(state)
            await session.flush()
        return state

    async def get_active_round(self, session: AsyncSession) -> Optional[Round]:
        """Current active round via the league state pointer (session-aware)"""
        state = await session.get(LeagueState, LeagueState.SINGLETON_ID)
        if state is None or state.active_round_id is None:
            return None
        return await session.get(Round, state.active_round_id)

    # ============================================================================
    # Player operations
    # ============================================================================

    async def get_player_by_id(self, player_id: int) -> Optional[Player]:
        """Get a player by primary key"""
        async with self.get_session() as session:
            return await session.get(Player, player_id)

    async def get_player_by_external_id(self, external_id: int) -> Optional[Player]:
        """Get a player by their Discord ID"""
        async with self.get_session() as session:
            result = await session.execute(
                select(Player).where(Player.external_id == external_id)
            )
            return result.scalar_one_or_none()

    async def get_roster(self, session: Optional[AsyncSession] = None) -> List[Player]:
        """Active players ordered by rating, highest first"""
        query = (
            select(Player)
            .where(Player.is_active == True)
            .order_by(Player.elo_rating.desc(), Player.id)
        )
        if session is not None:
            result = await session.execute(query)
            return list(result.scalars().all())
        async with self.get_session() as new_session:
            result = await new_session.execute(query)
            return list(result.scalars().all())
