"""Обработчики добавления, просмотра и удаления замеров."""
from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
    ConversationHandler,
    MessageHandler,
    filters,
    ContextTypes,
)
from src.keyboards.measurement_menu import decode_timestamp, get_entry_keyboard
from src.services.entry_aggregator import MeasurementEntry, sort_kinds
from src.services.kinds import MEASUREMENT_KINDS, title_for, unit_for
from src.services.measurement_service import (
    MeasurementValidationError,
    delete_entry,
    load_entries,
    parse_measurement_text,
    submit_measurements,
)
from src.services.measurement_store import StoreError
from src.services.reminder_scheduler import REMINDER_ACTION_TYPE
from src.services.trend import MeasurementCard, build_cards, format_change, trend_direction
from src.services.user_service import get_or_create_user
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# Состояние формы
WAITING_VALUES = 1

# Сколько последних записей показывать в /history
HISTORY_LIMIT = 5

DEGRADED_NOTICE = "⚠️ Нет связи с базой — работаю с локальной копией."
OFFLINE_TEXT = "⚠️ Нет связи с базой. Попробуй чуть позже."

TREND_ICONS = {"up": "📈", "down": "📉", "flat": "➖"}

FORM_TEXT = (
    "📏 <b>Новые замеры</b>\n\n"
    "Отправь значения, каждое с новой строки или через запятую:\n"
    "<code>грудь 102.5\nталия 85\nвес 72,4</code>\n\n"
    "Параметры: " + ", ".join(f"{title_for(k).lower()} ({unit_for(k)})" for k in MEASUREMENT_KINDS)
    + "\n\nПустые и неположительные значения пропускаются. /cancel — отмена."
)


def owner_id_for(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Optional[int]:
    """ID владельца записей — пользователь Telegram, приславший update.

    Если БД недоступна, берётся последний известный ID (из user_data или
    локального кеша), чтобы замеры продолжали работать через кеш.
    None — владелец неизвестен.
    """
    telegram_id = update.effective_user.id
    local = context.bot_data["store"].secondary

    try:
        user = get_or_create_user(update.effective_user, update.effective_chat.id)
    except SQLAlchemyError as e:
        logger.error(f"Could not resolve owner for telegram user {telegram_id}: {e}")
        owner_id = context.user_data.get("owner_id")
        if owner_id is None:
            owner_id = local.cached_owner_id(telegram_id)
        return owner_id

    if context.user_data.get("owner_id") != user.id:
        context.user_data["owner_id"] = user.id
        local.remember_owner(telegram_id, user.id)
    return user.id


async def resolve_owner(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Optional[int]:
    """owner_id_for + сообщение пользователю, если владелец неизвестен."""
    owner_id = owner_id_for(update, context)
    if owner_id is None:
        await update.effective_message.reply_text(OFFLINE_TEXT)
    return owner_id


def format_card(card: MeasurementCard) -> str:
    line = f"{title_for(card.kind)}: <b>{card.value:.1f}</b> {card.unit}"
    if card.change is not None:
        icon = TREND_ICONS[trend_direction(card.change)]
        line += f"  {icon} {format_change(card.change)}"
    return line


def format_cards(cards: list[MeasurementCard]) -> str:
    """Текст «текущих замеров» с изменениями к прошлой записи."""
    if not cards:
        return "Пока нет ни одного замера. Добавь первый: /add"

    date_text = cards[0].recorded_at.strftime("%d.%m.%Y")
    lines = [f"📊 <b>Текущие замеры</b> ({date_text})", ""]
    lines.extend(format_card(card) for card in cards)
    return "\n".join(lines)


def format_entry(entry: MeasurementEntry) -> str:
    lines = [f"🗓 <b>{entry.recorded_at.strftime('%d.%m.%Y %H:%M')}</b>"]
    for kind in sort_kinds(entry.values):
        lines.append(f"• {title_for(kind)}: {entry.values[kind]:.1f} {unit_for(kind)}")
    return "\n".join(lines)


def remember_selected_kinds(context: ContextTypes.DEFAULT_TYPE, kinds) -> None:
    """Новые параметры сразу попадают в фильтр графика."""
    selected = context.user_data.get("selected_kinds")
    if selected is None:
        return
    for kind in kinds:
        if kind not in selected:
            selected.append(kind)


async def add_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Начало ввода замеров (/add или кнопка под напоминанием)."""
    if update.callback_query:
        await update.callback_query.answer()
        await update.callback_query.message.reply_text(FORM_TEXT, parse_mode="HTML")
    else:
        await update.message.reply_text(FORM_TEXT, parse_mode="HTML")
    return WAITING_VALUES


async def save_values(update: Update, context: ContextTypes.DEFAULT_TYPE, raw: dict) -> bool:
    """Сохранение формы. False — ничего не сохранено."""
    store = context.bot_data["store"]
    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return False

    try:
        result = submit_measurements(store, owner_id, raw)
    except MeasurementValidationError:
        await update.message.reply_text(
            "❌ Укажи хотя бы один замер положительным числом, например: <code>талия 85</code>",
            parse_mode="HTML",
        )
        return False
    except StoreError as e:
        logger.error(f"Submit failed for owner {owner_id}: {e}")
        await update.message.reply_text("❌ Не удалось сохранить замеры. Попробуй ещё раз.")
        return False

    remember_selected_kinds(context, result.values.keys())

    entries, degraded = load_entries(store, owner_id)
    text = "✅ Замеры записаны!\n\n" + format_cards(build_cards(entries))
    if result.degraded or degraded:
        text += f"\n\n{DEGRADED_NOTICE}"
    await update.message.reply_text(text, parse_mode="HTML")
    return True


async def receive_values(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    raw = parse_measurement_text(update.message.text)
    if not await save_values(update, context, raw):
        return WAITING_VALUES
    return ConversationHandler.END


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    await update.message.reply_text("❌ Ввод замеров отменён.")
    return ConversationHandler.END


async def weight_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Быстрый ввод веса: /weight 72.4"""
    if not context.args:
        await update.message.reply_text("Использование: /weight 72.4")
        return
    await save_values(update, context, {"weight": context.args[0]})


async def latest_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Карточки последних замеров."""
    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    entries, degraded = load_entries(context.bot_data["store"], owner_id)
    text = format_cards(build_cards(entries))
    if degraded:
        text += f"\n\n{DEGRADED_NOTICE}"
    await update.message.reply_text(text, parse_mode="HTML")


async def history_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Последние записи с кнопкой удаления."""
    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    entries, degraded = load_entries(context.bot_data["store"], owner_id)

    if not entries:
        await update.message.reply_text("История пуста. Добавь замеры: /add")
        return

    if degraded:
        await update.message.reply_text(DEGRADED_NOTICE)

    for entry in entries[-HISTORY_LIMIT:]:
        await update.message.reply_text(
            format_entry(entry),
            reply_markup=get_entry_keyboard(entry.recorded_at),
            parse_mode="HTML",
        )


async def delete_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Удаление записи целиком по кнопке."""
    query = update.callback_query
    await query.answer()

    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    recorded_at = decode_timestamp(query.data.split(":", 1)[1])
    result = delete_entry(context.bot_data["store"], owner_id, recorded_at)

    if not result.ok:
        await query.message.reply_text("⚠️ Не удалось удалить запись. Попробуй позже.")
        return

    if not result.value:
        await query.edit_message_text("⚠️ Запись не найдена.")
        return

    text = "🗑 Запись удалена."
    if result.degraded:
        text += f"\n{DEGRADED_NOTICE}"
    await query.edit_message_text(text)


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    add_conv_handler = ConversationHandler(
        entry_points=[
            CommandHandler("add", add_start),
            CallbackQueryHandler(add_start, pattern=f"^action:{REMINDER_ACTION_TYPE}$"),
        ],
        states={
            WAITING_VALUES: [MessageHandler(filters.TEXT & ~filters.COMMAND, receive_values)],
        },
        fallbacks=[CommandHandler("cancel", cancel)],
    )
    application.add_handler(add_conv_handler)

    application.add_handler(CommandHandler("weight", weight_command))
    application.add_handler(CommandHandler("latest", latest_command))
    application.add_handler(CommandHandler("history", history_command))
    application.add_handler(CallbackQueryHandler(delete_callback, pattern=r"^entry_delete:"))
