"""FastAPI application entry point."""
import asyncio
import contextlib
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from core.cards import CardPool, load_card_pool
from core.constants import CLEANUP_INTERVAL_SECONDS
from core.logging import setup_logging
from core.room_manager import RoomManager
from core.settings import ServerSettings, load_settings
from routes.rooms import router as rooms_router
from services.role_config_service import RoleConfigService

logger = structlog.get_logger()


async def _cleanup_loop(manager: RoomManager, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        manager.cleanup_stale_rooms()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(
        "server starting",
        max_players=app.state.settings.max_players_per_room,
        cards=len(app.state.card_pool),
        presets=app.state.role_service.preset_names(),
    )
    cleanup = asyncio.create_task(_cleanup_loop(app.state.room_manager, CLEANUP_INTERVAL_SECONDS))
    yield
    cleanup.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup
    logger.info("server stopped")


def create_app(
    settings: ServerSettings | None = None,
    card_pool: CardPool | None = None,
    countdown_interval: float = 1.0,
) -> FastAPI:
    """Build the application and its shared state.

    Args:
        settings: Server settings, loaded from config/server.yaml when omitted
        card_pool: Cards to deal, loaded from settings.cards_path when omitted
        countdown_interval: Seconds per countdown tick

    Returns:
        The configured FastAPI app
    """
    settings = settings or load_settings()
    if card_pool is None:
        card_pool = load_card_pool(settings.cards_path) if settings.cards_path else CardPool()
    if not len(card_pool):
        logger.warning("card pool is empty, players will be dealt no roles", cards_path=settings.cards_path)

    role_service = RoleConfigService(settings, card_pool)

    app = FastAPI(title="Treachery", lifespan=lifespan)
    app.state.settings = settings
    app.state.card_pool = card_pool
    app.state.role_service = role_service
    app.state.room_manager = RoomManager(settings, role_service)
    app.state.countdown_interval = countdown_interval
    app.include_router(rooms_router)
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
