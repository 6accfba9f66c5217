import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from storefront.api.client import ApiClient
from storefront.bot.handlers import router
from storefront.bot.states import STOREFRONTS
from storefront.config import settings


async def main() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    if not settings.bot_token:
        raise RuntimeError("BOT_TOKEN is empty. Set BOT_TOKEN in .env")

    bot = Bot(token=settings.bot_token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()
    dp.include_router(router)

    async with ApiClient() as api:
        dp["api"] = api
        try:
            await dp.start_polling(bot)
        finally:
            await STOREFRONTS.close()
            await bot.session.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
