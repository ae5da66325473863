from decimal import Decimal
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    SQL_ECHO: bool = False

    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    DEFAULT_DELIVERY_ADDRESS: str = "No address provided"
    # допустимое относительное отклонение цены клиента от цены каталога; None - без проверки
    PRICE_TOLERANCE: Optional[Decimal] = Decimal("0.01")
    ENFORCE_STATUS_TRANSITIONS: bool = False

    class Config:
        env_file = ".env"

settings = Settings()
