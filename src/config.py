"""Конфигурация бота из переменных окружения."""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Config:
    """Настройки бота."""

    BOT_TOKEN: str
    DATABASE_URL: str
    ADMIN_ID: int | None
    # Локальный JSON-кеш замеров (fallback при недоступной БД)
    LOCAL_CACHE_PATH: str = "body_tracker_cache.json"
    # Supabase (опционально, вместо DATABASE_URL)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    # Часовой пояс для ежедневных напоминаний
    REMINDER_TIMEZONE: str = "UTC"

    @classmethod
    def from_env(cls) -> "Config":
        """Загрузка конфигурации из окружения."""
        return cls(
            BOT_TOKEN=os.getenv("BOT_TOKEN", ""),
            DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///body_tracker.db"),
            ADMIN_ID=int(os.getenv("ADMIN_ID")) if os.getenv("ADMIN_ID") else None,
            LOCAL_CACHE_PATH=os.getenv("LOCAL_CACHE_PATH", "body_tracker_cache.json"),
            SUPABASE_URL=os.getenv("SUPABASE_URL", ""),
            SUPABASE_KEY=os.getenv("SUPABASE_KEY", ""),
            REMINDER_TIMEZONE=os.getenv("REMINDER_TIMEZONE", "UTC"),
        )

    def validate(self) -> None:
        """Проверка обязательных настроек."""
        if not self.BOT_TOKEN:
            raise ValueError("BOT_TOKEN не установлен в .env")
        if self.SUPABASE_URL and not self.SUPABASE_KEY:
            raise ValueError("SUPABASE_KEY не установлен в .env")
        # Supabase опционально — без него работает DATABASE_URL


# Глобальный экземпляр конфигурации
config = Config.from_env()
