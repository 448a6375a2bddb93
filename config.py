"""Конфигурация приложения"""
from datetime import timedelta, timezone
from decimal import Decimal
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Настройки приложения"""

    # Telegram Bot
    BOT_TOKEN: str

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = ""
    DB_PASSWORD: str = ""
    DB_NAME: str = ""
    # Полный URL, если задан, имеет приоритет над DB_*
    DATABASE_URL: str = ""
    DB_ECHO: bool = False

    # Admin
    ADMIN_USER_IDS: str = ""

    # Отображение
    CURRENCY_SYMBOL: str = "€"
    # Часовой пояс для отображения и ввода дат (Париж, без перехода на летнее время)
    DISPLAY_UTC_OFFSET_HOURS: int = 1
    BIDS_HISTORY_LIMIT: int = 10
    # Шаги быстрых ставок, через запятую
    BID_QUICK_STEPS: str = "10,50,100"

    # Планировщик завершения аукционов
    AUCTION_CHECK_INTERVAL_SECONDS: int = 60

    LOG_LEVEL: str = "INFO"

    @property
    def admin_ids_list(self) -> List[int]:
        """Список ID администраторов"""
        if not self.ADMIN_USER_IDS:
            return []
        return [int(uid.strip()) for uid in self.ADMIN_USER_IDS.split(",") if uid.strip()]

    @property
    def quick_steps_list(self) -> List[Decimal]:
        """Шаги быстрых ставок"""
        return [Decimal(step.strip()) for step in self.BID_QUICK_STEPS.split(",") if step.strip()]

    @property
    def display_tz(self) -> timezone:
        return timezone(timedelta(hours=self.DISPLAY_UTC_OFFSET_HOURS))

    @property
    def database_url(self) -> str:
        """URL подключения к базе данных"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
