"""Обработчики ежедневных напоминаний о замерах."""
from zoneinfo import ZoneInfo
from telegram import Update
from telegram.ext import Application, CommandHandler, CallbackQueryHandler, ContextTypes
from src.config import config
from src.handlers.measurements import OFFLINE_TEXT, resolve_owner
from src.keyboards.measurement_menu import (
    get_reminder_notification_keyboard,
    get_reminders_keyboard,
)
from src.services.notification_ports import build_notification_port
from src.services.reminder_scheduler import ReminderScheduler
from src.services.reminder_service import (
    ReminderOutcome,
    ReminderSettingsStore,
    change_reminder_time,
    disable_reminders,
    enable_reminders,
)
from src.services.user_service import get_user_by_id
from sqlalchemy.exc import SQLAlchemyError
import logging

logger = logging.getLogger(__name__)

OUTCOME_MESSAGES = {
    ReminderOutcome.ENABLED: "🔔 Напоминания включены: каждый день в {time}.",
    ReminderOutcome.DISABLED: "🔕 Напоминания выключены.",
    ReminderOutcome.TIME_UPDATED: "⏰ Время напоминаний изменено на {time}.",
    ReminderOutcome.TIME_SAVED: "⏰ Время {time} сохранено. Включить напоминания: /reminders",
    ReminderOutcome.PERMISSION_DENIED: (
        "❌ Напоминания недоступны: бот запущен без очереди задач."
    ),
    ReminderOutcome.SCHEDULING_FAILED: "❌ Не удалось запланировать напоминания. Попробуй ещё раз.",
    ReminderOutcome.INVALID_TIME: "❌ Время нужно в формате ЧЧ:ММ, например: /reminder_time 08:00",
}


async def send_reminder(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Срабатывание отложенной задачи: отправка напоминания в чат."""
    job = context.job
    payload = job.data or {}
    await context.bot.send_message(
        chat_id=job.chat_id,
        text=f"⏰ <b>{payload.get('title', '')}</b>\n{payload.get('body', '')}",
        reply_markup=get_reminder_notification_keyboard(),
        parse_mode="HTML",
    )


def scheduler_for(context: ContextTypes.DEFAULT_TYPE, chat_id: int) -> ReminderScheduler:
    """Планировщик для чата: JobQueue, если он установлен, иначе заглушка."""
    port = build_notification_port(context.job_queue, chat_id, send_reminder)
    return ReminderScheduler(port, tz=ZoneInfo(config.REMINDER_TIMEZONE))


def settings_store_for(context: ContextTypes.DEFAULT_TYPE) -> ReminderSettingsStore:
    return context.bot_data["reminder_settings"]


async def reminders_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Текущие настройки напоминаний."""
    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    try:
        settings = settings_store_for(context).load(owner_id)
    except SQLAlchemyError as e:
        logger.error(f"Could not load reminder settings for owner {owner_id}: {e}")
        await update.message.reply_text(OFFLINE_TEXT)
        return

    status = f"включены, в {settings.time}" if settings.enabled else "выключены"

    await update.message.reply_text(
        f"🔔 <b>Ежедневные напоминания</b>\n\n"
        f"Сейчас: {status}\n"
        f"Изменить время: /reminder_time ЧЧ:ММ",
        reply_markup=get_reminders_keyboard(settings.enabled),
        parse_mode="HTML",
    )


async def reminders_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Включение/выключение по кнопке."""
    query = update.callback_query
    await query.answer()

    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    scheduler = scheduler_for(context, update.effective_chat.id)
    settings_store = settings_store_for(context)

    try:
        if query.data == "reminders:on":
            outcome = enable_reminders(owner_id, scheduler, settings_store)
        else:
            outcome = disable_reminders(owner_id, scheduler, settings_store)
        settings = settings_store.load(owner_id)
    except SQLAlchemyError as e:
        logger.error(f"Could not update reminder settings for owner {owner_id}: {e}")
        await query.message.reply_text(OFFLINE_TEXT)
        return

    await query.edit_message_text(
        OUTCOME_MESSAGES[outcome].format(time=settings.time),
        reply_markup=get_reminders_keyboard(settings.enabled),
    )


async def reminder_time_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/reminder_time 08:00"""
    if not context.args:
        await update.message.reply_text(OUTCOME_MESSAGES[ReminderOutcome.INVALID_TIME])
        return

    owner_id = await resolve_owner(update, context)
    if owner_id is None:
        return

    new_time = context.args[0]
    try:
        outcome = change_reminder_time(
            owner_id,
            new_time,
            scheduler_for(context, update.effective_chat.id),
            settings_store_for(context),
        )
    except SQLAlchemyError as e:
        logger.error(f"Could not update reminder time for owner {owner_id}: {e}")
        await update.message.reply_text(OFFLINE_TEXT)
        return

    await update.message.reply_text(OUTCOME_MESSAGES[outcome].format(time=new_time))


async def restore_reminders(application: Application) -> None:
    """После перезапуска задачи JobQueue потеряны — ставим окно заново."""
    if application.job_queue is None:
        logger.warning("JobQueue не установлен, напоминания отключены")
        return

    settings_store: ReminderSettingsStore = application.bot_data["reminder_settings"]
    tz = ZoneInfo(config.REMINDER_TIMEZONE)
    restored = 0

    for owner_id in settings_store.enabled_owner_ids():
        user = get_user_by_id(owner_id)
        if not user or not user.chat_id:
            continue

        port = build_notification_port(application.job_queue, user.chat_id, send_reminder)
        settings = settings_store.load(owner_id)
        if ReminderScheduler(port, tz=tz).schedule(settings.time):
            restored += 1

    logger.info(f"Restored reminders for {restored} users")


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    application.add_handler(CommandHandler("reminders", reminders_command))
    application.add_handler(CommandHandler("reminder_time", reminder_time_command))
    application.add_handler(CallbackQueryHandler(reminders_callback, pattern=r"^reminders:(on|off)$"))
