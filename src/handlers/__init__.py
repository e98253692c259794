"""Обработчики команд бота."""
from src.handlers.start import register_handlers as register_start_handlers
from src.handlers.measurements import register_handlers as register_measurement_handlers
from src.handlers.chart import register_handlers as register_chart_handlers
from src.handlers.reminders import register_handlers as register_reminder_handlers
from src.handlers.reminders import restore_reminders

__all__ = [
    "register_start_handlers",
    "register_measurement_handlers",
    "register_chart_handlers",
    "register_reminder_handlers",
    "restore_reminders",
]
