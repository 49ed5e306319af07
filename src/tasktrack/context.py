"""Per-app runtime context.

Learn: Everything that would otherwise be process-global state (the
settings, the DB engine and session factory, the token signer) lives on
one AppContext built by create_app() and stored at app.state.ctx.
Two apps (e.g. two tests) never share an engine or a signing key.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tasktrack.auth.jwt import TokenService
from tasktrack.config import Settings
from tasktrack.db.engine import build_engine, build_session_factory


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    tokens: TokenService

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            tokens=TokenService.from_settings(settings),
        )

    async def close(self) -> None:
        await self.engine.dispose()
