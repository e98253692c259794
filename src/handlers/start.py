"""Обработчики команд /start и /help."""
from telegram import (
    Update,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
)
from telegram.ext import Application, CommandHandler, ContextTypes
from src.services.reminder_scheduler import REMINDER_ACTION_TYPE
from src.services.user_service import get_or_create_user


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработка команды /start."""
    user = get_or_create_user(update.effective_user, update.effective_chat.id)

    keyboard = [
        [InlineKeyboardButton("📏 Записать замеры", callback_data=f"action:{REMINDER_ACTION_TYPE}")]
    ]
    reply_markup = InlineKeyboardMarkup(keyboard)

    await update.message.reply_text(
        f"👋 Привет, {user.first_name or 'друг'}!\n\n"
        "Я помогу отслеживать замеры тела: грудь, талию, бицепс, вес и другие.\n"
        "Покажу изменения и нарисую график прогресса.\n\n"
        "Список команд: /help",
        reply_markup=reply_markup,
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработка команды /help."""
    text = (
        "📖 <b>Команды бота:</b>\n\n"
        "📏 <b>Замеры:</b>\n"
        "/add - Записать замеры\n"
        "/weight 72.4 - Быстро записать вес\n"
        "/latest - Текущие значения и изменения\n"
        "/history - Последние записи (с удалением)\n\n"
        "📈 <b>График:</b>\n"
        "/chart - Выбрать параметры и показать график\n\n"
        "🔔 <b>Напоминания:</b>\n"
        "/reminders - Включить/выключить\n"
        "/reminder_time 08:00 - Время напоминания\n\n"
        "💡 <b>Советы:</b>\n"
        "• Меряй в одно и то же время, лучше утром\n"
        "• Талия — в самом узком месте, обычно над пупком\n"
        "• Бицепс — в самой широкой части напряжённой руки\n"
        "• Раз в неделю достаточно, чтобы видеть тренд"
    )
    await update.message.reply_text(text, parse_mode="HTML")


def register_handlers(application: Application) -> None:
    """Регистрация обработчиков."""
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
