"""Точка входа для Body Tracker Bot."""
import logging
from telegram.ext import Application
from src.config import config
from src.database import init_db
from src.handlers import (
    register_start_handlers,
    register_measurement_handlers,
    register_chart_handlers,
    register_reminder_handlers,
    restore_reminders,
)
from src.services.measurement_service import build_store
from src.services.reminder_service import ReminderSettingsStore

# Настройка логирования
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Запуск бота."""
    # Проверка конфигурации
    try:
        config.validate()
    except ValueError as e:
        logger.error(f"Ошибка конфигурации: {e}")
        return

    # Инициализация БД
    logger.info("Инициализация базы данных...")
    init_db()

    # Создание приложения
    logger.info("Запуск бота...")
    application = (
        Application.builder().token(config.BOT_TOKEN).post_init(restore_reminders).build()
    )

    # Общие зависимости обработчиков
    application.bot_data["store"] = build_store()
    application.bot_data["reminder_settings"] = ReminderSettingsStore()

    # Регистрация обработчиков
    register_start_handlers(application)
    register_measurement_handlers(application)
    register_chart_handlers(application)
    register_reminder_handlers(application)

    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
