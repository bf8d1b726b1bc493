"""
Community Repair Hub bot entry point.

Owns the lifetime of the shared HTTP client; every signup session gets its
own view-model built on top of it.
"""

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from repairhub.config import Settings, settings
from repairhub.handlers import signup
from repairhub.logging_setup import setup_logging
from repairhub.network.client import create_http_client
from repairhub.services.auth import AuthService
from repairhub.services.directory import DirectoryError, RemoteRegionDirectory
from repairhub.services.token_store import InMemoryTokenStore, RedisTokenStore, TokenStore
from repairhub.sessions import SignupSessions
from repairhub.viewmodels.signup import SignupViewModel

logger = logging.getLogger(__name__)


def build_token_store(cfg: Settings) -> TokenStore:
    if cfg.TOKEN_STORE == "redis":
        return RedisTokenStore.from_url(cfg.REDIS_URL)
    return InMemoryTokenStore()


async def run(cfg: Settings) -> None:
    bot = Bot(token=cfg.TELEGRAM_BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()
    dp.include_router(signup.router)

    async with create_http_client(cfg) as http:
        auth = AuthService(http)
        directory = RemoteRegionDirectory(http)
        token_store = build_token_store(cfg)
        try:
            await directory.fetch_region_city_map()
        except DirectoryError as e:
            logger.warning("Using bundled region list: %s", e)

        dp["sessions"] = SignupSessions(lambda: SignupViewModel(auth, token_store, directory))
        logger.info("🚀 Repair Hub bot starting...")
        try:
            await dp.start_polling(bot)
        finally:
            await bot.session.close()
            logger.info("🛑 Repair Hub bot shut down.")


def main() -> None:
    setup_logging(settings.LOG_LEVEL)
    if not settings.TELEGRAM_BOT_TOKEN:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")
    asyncio.run(run(settings))


if __name__ == "__main__":
    main()
