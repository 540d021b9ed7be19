# main.py: long polling, survives 409 Conflict without closing the event loop
from __future__ import annotations
import asyncio
import logging
from typing import Optional

from telegram import Update
from telegram.error import Conflict as TgConflict
from telegram.ext import Application, ApplicationBuilder

from config import LOG_LEVEL, TOKEN
from bot.handlers import register_handlers

# ЛОГИ
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
# httpx logs every request URL at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)
log = logging.getLogger("main")


async def build_app() -> Application:
    app = ApplicationBuilder().token(TOKEN).build()
    register_handlers(app)
    log.info("Handlers зарегистрированы.")
    return app


async def start_polling(app: Application) -> None:
    # Drop a leftover webhook, otherwise getUpdates conflicts with it
    try:
        await app.bot.delete_webhook(drop_pending_updates=True)
        log.info("Webhook удалён (drop_pending_updates=True).")
    except Exception as e:
        log.warning("Не удалось удалить webhook: %s", e)

    await app.initialize()
    await app.start()
    await app.updater.start_polling(  # type: ignore[union-attr]
        allowed_updates=Update.ALL_TYPES,
        timeout=30,  # long-poll таймаут
    )
    log.info("Polling запущен.")


async def stop(app: Application) -> None:
    try:
        if app.updater and app.updater.running:
            await app.updater.stop()
    except Exception as e:
        log.warning("updater.stop failed: %s", e)
    try:
        if app.running:
            await app.stop()
        await app.shutdown()
    except Exception as e:
        log.warning("app.stop failed: %s", e)


async def run_forever() -> None:
    """
    Keeps exactly one polling instance alive; restarts on errors with a backoff.
    """
    while True:
        app: Optional[Application] = None
        try:
            app = await build_app()
            await start_polling(app)
            # polling runs in background tasks, just wait here
            while app.updater and app.updater.running:
                await asyncio.sleep(5)
            log.warning("Polling завершился без исключения. Перезапуск через 5 секунд.")
            await asyncio.sleep(5)

        except TgConflict as e:
            # second getUpdates consumer on the same token
            log.error("409 Conflict (кто-то ещё вызывает getUpdates на этом токене): %s", e)
            await asyncio.sleep(20)

        except Exception as e:
            log.exception("Неожиданная ошибка в polling цикле: %s", e)
            await asyncio.sleep(5)

        finally:
            if app is not None:
                await stop(app)


def main() -> None:
    if not TOKEN:
        raise RuntimeError("TELEGRAM_BOT_TOKEN не задан в переменных окружения")
    log.info(">>> ENTER main.py")
    try:
        asyncio.run(run_forever())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
