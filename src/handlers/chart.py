"""Обработчики графика прогресса и фильтра параметров."""
import io
from typing import Optional
from telegram import Update, InputFile
from telegram.ext import Application, CommandHandler, CallbackQueryHandler, ContextTypes
from src.handlers.measurements import DEGRADED_NOTICE, resolve_owner
from src.keyboards.measurement_menu import get_chart_filter_keyboard
from src.services.chart_generator import generate_progress_chart
from src.services.entry_aggregator import distinct_kinds, sort_kinds
from src.services.measurement_service import load_entries


def selected_kinds_for(user_data: dict, available: list[str]) -> list[str]:
    """Выбранные параметры графика. По умолчанию — все доступные."""
    selected = user_data.get("selected_kinds")
    if selected is None:
        selected = list(available)
        user_data["selected_kinds"] = selected
    return selected


def toggle_kind(selected: list[str], kind: str) -> list[str]:
    """Вкл/выкл параметр на графике (изменяет список на месте)."""
    if kind in selected:
        selected.remove(kind)
    else:
        selected.append(kind)
    return selected


def kind_at(available: list[str], raw_index: str) -> Optional[str]:
    """Параметр по индексу из callback_data. None — кнопка устарела."""
    try:
        index = int(raw_index)
    except ValueError:
        return None
    if 0 <= index < len(available):
        return available[index]
    return None


async def chart_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Фильтр параметров + кнопка показа графика."""
    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    entries, degraded = load_entries(context.bot_data["store"], owner_id)
    available = sort_kinds(distinct_kinds(entries))

    if not available:
        await update.message.reply_text("Пока нечего показать. Добавь замеры: /add")
        return

    selected = selected_kinds_for(context.user_data, available)
    text = "📈 <b>Параметры на графике</b>\nНажми, чтобы включить или выключить."
    if degraded:
        text += f"\n\n{DEGRADED_NOTICE}"

    await update.message.reply_text(
        text,
        reply_markup=get_chart_filter_keyboard(available, selected),
        parse_mode="HTML",
    )


async def chart_toggle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    entries, _ = load_entries(context.bot_data["store"], owner_id)
    available = sort_kinds(distinct_kinds(entries))

    kind = kind_at(available, query.data.split(":", 1)[1])
    if kind is None:
        return

    selected = toggle_kind(selected_kinds_for(context.user_data, available), kind)
    await query.edit_message_reply_markup(
        reply_markup=get_chart_filter_keyboard(available, selected)
    )


async def chart_show_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()

    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    entries, _ = load_entries(context.bot_data["store"], owner_id)
    available = sort_kinds(distinct_kinds(entries))
    selected = selected_kinds_for(context.user_data, available)

    chart_img = generate_progress_chart(entries, selected)
    if not chart_img:
        await query.message.reply_text("Выбери хотя бы один параметр с данными.")
        return

    await query.message.reply_photo(
        photo=InputFile(io.BytesIO(chart_img), filename="progress_chart.png"),
        caption=f"📈 Записей: {len(entries)}",
    )


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    application.add_handler(CommandHandler("chart", chart_command))
    application.add_handler(CallbackQueryHandler(chart_toggle_callback, pattern=r"^chart_toggle:"))
    application.add_handler(CallbackQueryHandler(chart_show_callback, pattern=r"^chart_show$"))
