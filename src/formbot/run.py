import asyncio
import logging
from aiogram import Bot, Dispatcher
from .config import load_settings
from .db import ensure_schema, ensure_sqlite_dir, make_engine, make_sessionmaker
from .handlers import register_handlers

logger = logging.getLogger(__name__)

async def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = load_settings()
    bot = Bot(settings.bot_token)
    try:
        ensure_sqlite_dir(settings.database_url)
        engine = make_engine(settings.database_url)
        await ensure_schema(engine)
        sessionmaker = make_sessionmaker(engine)

        dp = Dispatcher()
        register_handlers(dp, settings=settings, sessionmaker=sessionmaker)

        await dp.start_polling(bot)
    except Exception:
        logger.exception("bot_run_failed")
        raise
    finally:
        await bot.session.close()

if __name__ == "__main__":
    asyncio.run(main())
