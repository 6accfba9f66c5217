import logging
from functools import partial
from html import escape

from aiogram import Bot, F, Router
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message, ReplyKeyboardRemove

from storefront.api.client import ApiClient
from storefront.bot.keyboards import add_to_cart_kb, cart_kb, main_kb
from storefront.bot.states import STOREFRONTS, LoginForm, RegisterForm, SearchMode, Storefront
from storefront.constants import DECREMENT, DIRECTIONS, INCREMENT, MSG_REGISTERED
from storefront.errors import AlreadyInCart, CatalogUnavailable, StorefrontError, Unauthenticated
from storefront.services import auth
from storefront.services.search import SearchCoordinator
from storefront.utils.formatters import cart_text, money, product_line, products_text
from storefront.utils.validators import validate_credentials

logger = logging.getLogger(__name__)

router = Router()

PAGE_SIZE = 20
CARDS_LIMIT = 5


def _error_text(e: StorefrontError) -> str:
    # то, что пользователь может исправить сам, - предупреждение, остальное - ошибка
    if isinstance(e, (AlreadyInCart, Unauthenticated)):
        return f"⚠️ {e.message}"
    return f"❌ {e.message}"


async def _send_products(bot: Bot, chat_id: int, products, title: str = "Products") -> None:
    products = list(products)
    if len(products) <= CARDS_LIMIT:
        # мало товаров - карточки с кнопкой
        for p in products:
            await bot.send_message(chat_id, product_line(p), reply_markup=add_to_cart_kb(p.id))
        return
    for i in range(0, len(products), PAGE_SIZE):
        await bot.send_message(chat_id, products_text(products[i : i + PAGE_SIZE], title))
    await bot.send_message(chat_id, "Add to cart: /add PRODUCT_ID")


async def _on_search_update(bot: Bot, chat_id: int, search: SearchCoordinator) -> None:
    if search.failed:
        await bot.send_message(chat_id, _error_text(search.error))
        return
    if search.not_found:
        await bot.send_message(chat_id, "😞 No products found")
        return
    title = f"Results for “{escape(search.query)}”" if search.query else "All products"
    await _send_products(bot, chat_id, search.products, title)


async def _storefront(chat_id: int, api: ApiClient, bot: Bot) -> Storefront:
    sf = STOREFRONTS.get(chat_id)
    if sf is None:
        sf = await STOREFRONTS.open(chat_id, api)
        sf.search.on_update = partial(_on_search_update, bot, chat_id)
        logger.info("storefront opened for chat %s (%d open)", chat_id, len(STOREFRONTS))
    return sf


async def _ensure_catalog(message: Message, sf: Storefront) -> bool:
    if not sf.catalog.loaded:
        try:
            await sf.catalog.load()
        except CatalogUnavailable as e:
            await message.answer(_error_text(e))
            return False
    # корзина могла прийти раньше каталога
    sf.cart.refresh()
    return True


async def _show_cart(message: Message, sf: Storefront) -> None:
    items = sf.cart.refresh()
    markup = cart_kb(items) if items else None
    await message.answer(cart_text(items, sf.view.totals), reply_markup=markup)


@router.message(Command("start"))
async def cmd_start(message: Message, api: ApiClient, bot: Bot):
    sf = await _storefront(message.chat.id, api, bot)
    await _ensure_catalog(message, sf)
    if sf.session is not None:
        try:
            await sf.cart.load()
        except StorefrontError as e:
            await message.answer(_error_text(e))
    await message.answer(
        f"✅ Store is open. Products in catalog: {len(sf.catalog)}",
        reply_markup=main_kb(sf.session is not None),
    )


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext, api: ApiClient, bot: Bot):
    await state.clear()
    sf = await _storefront(message.chat.id, api, bot)
    await message.answer("❎ Cancelled.", reply_markup=main_kb(sf.session is not None))


@router.message(Command("help"))
async def cmd_help(message: Message):
    text = (
        "<b>Store commands</b>\n\n"
        "/start - open the store\n"
        "/cancel - cancel input\n"
        "/help - this help\n\n"
        "<b>Products</b>\n"
        "/products - all products\n"
        "/search TEXT - search\n"
        "/search - search mode: every message refines the query\n\n"
        "<b>Account</b>\n"
        "/login - log in\n"
        "/register - sign up\n"
        "/logout - log out\n\n"
        "<b>Cart</b>\n"
        "/cart - show the cart\n"
        "/add PRODUCT_ID - add a product\n"
        "/inc PRODUCT_ID - +1\n"
        "/dec PRODUCT_ID - −1 (0 removes it from the cart)\n"
    )
    await message.answer(text)


@router.message(Command("products"))
async def cmd_products(message: Message, api: ApiClient, bot: Bot):
    sf = await _storefront(message.chat.id, api, bot)
    if not await _ensure_catalog(message, sf):
        return
    if not len(sf.catalog):
        await message.answer("😞 No products found")
        return
    await _send_products(bot, message.chat.id, sf.catalog.snapshot, "All products")


@router.message(Command("search"))
async def cmd_search(message: Message, command: CommandObject, state: FSMContext, api: ApiClient, bot: Bot):
    sf = await _storefront(message.chat.id, api, bot)
    await _ensure_catalog(message, sf)
    if command.args is not None:
        sf.search.submit(command.args)
        return
    await state.set_state(SearchMode.typing)
    await message.answer(
        "🔎 Type a query. Each new message refines the search, an empty one shows all products.\nExit: /cancel",
        reply_markup=ReplyKeyboardRemove(),
    )


@router.message(SearchMode.typing, F.text, ~F.text.startswith("/"))
async def search_keystroke(message: Message, api: ApiClient, bot: Bot):
    sf = await _storefront(message.chat.id, api, bot)
    sf.search.submit(message.text or "")


@router.message(Command("cart"))
async def cmd_cart(message: Message, api: ApiClient, bot: Bot):
    sf = await _storefront(message.chat.id, api, bot)
    if sf.session is None:
        await message.answer(_error_text(Unauthenticated()))
        return
    await _show_cart(message, sf)


@router.message(Command("add"))
async def cmd_add(message: Message, command: CommandObject, api: ApiClient, bot: Bot):
    sf = await _storefront(message.chat.id, api, bot)
    product_id = (command.args or "").strip()
    if not product_id:
        await message.answer("Usage: /add PRODUCT_ID")
        return
    await _ensure_catalog(message, sf)
    try:
        await sf.cart.add_new(product_id)
    except StorefrontError as e:
        await message.answer(_error_text(e))
        return
    await _show_cart(message, sf)


async def _adjust(message: Message, sf: Storefront, product_id: str, direction: str) -> None:
    try:
        await sf.cart.adjust(product_id, direction)
    except StorefrontError as e:
        await message.answer(_error_text(e))
        return
    await _show_cart(message, sf)


@router.message(Command("inc", "dec"))
async def cmd_inc_dec(message: Message, command: CommandObject, api: ApiClient, bot: Bot):
    sf = await _storefront(message.chat.id, api, bot)
    product_id = (command.args or "").strip()
    if not product_id:
        await message.answer(f"Usage: /{command.command} PRODUCT_ID")
        return
    direction = INCREMENT if command.command == "inc" else DECREMENT
    await _adjust(message, sf, product_id, direction)


@router.callback_query(F.data.startswith("add:"))
async def cb_add(callback: CallbackQuery, api: ApiClient, bot: Bot):
    sf = await _storefront(callback.message.chat.id, api, bot)
    product_id = callback.data.split(":", 1)[1]
    try:
        await sf.cart.add_new(product_id)
    except StorefrontError as e:
        await callback.answer(e.message, show_alert=True)
        return
    await callback.answer("✅ Added to cart")
    await _show_cart(callback.message, sf)


@router.callback_query(F.data.regexp(rf"^({'|'.join(DIRECTIONS)}):"))
async def cb_adjust(callback: CallbackQuery, api: ApiClient, bot: Bot):
    sf = await _storefront(callback.message.chat.id, api, bot)
    direction, product_id = callback.data.split(":", 1)
    try:
        items = await sf.cart.adjust(product_id, direction)
    except StorefrontError as e:
        await callback.answer(e.message, show_alert=True)
        return
    await callback.answer()
    await callback.message.edit_text(
        cart_text(items, sf.view.totals),
        reply_markup=cart_kb(items) if items else None,
    )


@router.callback_query(F.data == "noop")
async def cb_noop(callback: CallbackQuery):
    await callback.answer()


# ---------------- auth ----------------

@router.message(Command("login"))
async def cmd_login(message: Message, state: FSMContext):
    await state.clear()
    await state.set_state(LoginForm.waiting_username)
    await message.answer("Enter your username.\nCancel: /cancel", reply_markup=ReplyKeyboardRemove())


@router.message(LoginForm.waiting_username)
async def login_username(message: Message, state: FSMContext):
    username = (message.text or "").strip()
    if username.startswith("/"):
        await message.answer("Send the username as text. Cancel: /cancel")
        return
    await state.update_data(username=username)
    await state.set_state(LoginForm.waiting_password)
    await message.answer("Enter your password.\nCancel: /cancel")


@router.message(LoginForm.waiting_password)
async def login_password(message: Message, state: FSMContext, api: ApiClient, bot: Bot):
    password = message.text or ""
    data = await state.get_data()
    username = str(data.get("username", ""))

    problem = validate_credentials(username, password)
    if problem:
        await state.clear()
        await message.answer(f"⚠️ {problem}\nTry again: /login")
        return

    sf = await _storefront(message.chat.id, api, bot)
    try:
        session = await auth.login(api, username, password)
    except StorefrontError as e:
        await message.answer(_error_text(e))
        return
    finally:
        await state.clear()

    sf.cart.session = session
    await _ensure_catalog(message, sf)
    try:
        await sf.cart.load()
    except StorefrontError as e:
        await message.answer(_error_text(e))
    await message.answer(
        f"✅ Logged in as <b>{escape(session.username)}</b>. Balance: {money(session.balance)}",
        reply_markup=main_kb(True),
    )


@router.message(Command("register"))
async def cmd_register(message: Message, state: FSMContext):
    await state.clear()
    await state.set_state(RegisterForm.waiting_username)
    await message.answer(
        "Registration.\n1/3) Enter a username.\nCancel: /cancel",
        reply_markup=ReplyKeyboardRemove(),
    )


@router.message(RegisterForm.waiting_username)
async def register_username(message: Message, state: FSMContext):
    await state.update_data(username=(message.text or "").strip())
    await state.set_state(RegisterForm.waiting_password)
    await message.answer("2/3) Enter a password.\nCancel: /cancel")


@router.message(RegisterForm.waiting_password)
async def register_password(message: Message, state: FSMContext):
    await state.update_data(password=message.text or "")
    await state.set_state(RegisterForm.waiting_confirm)
    await message.answer("3/3) Confirm the password.\nCancel: /cancel")


@router.message(RegisterForm.waiting_confirm)
async def register_confirm(message: Message, state: FSMContext, api: ApiClient):
    data = await state.get_data()
    await state.clear()
    username = str(data.get("username", ""))
    password = str(data.get("password", ""))

    problem = validate_credentials(username, password, message.text or "")
    if problem:
        await message.answer(f"⚠️ {problem}\nTry again: /register")
        return

    try:
        await auth.register(api, username, password)
    except StorefrontError as e:
        await message.answer(_error_text(e))
        return
    await message.answer(f"✅ {MSG_REGISTERED}. Now log in: /login", reply_markup=main_kb(False))


@router.message(Command("logout"))
async def cmd_logout(message: Message, state: FSMContext, api: ApiClient, bot: Bot):
    await state.clear()
    sf = await _storefront(message.chat.id, api, bot)
    sf.cart.clear()
    await message.answer("👋 Logged out.", reply_markup=main_kb(False))
