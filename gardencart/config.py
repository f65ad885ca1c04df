from decimal import Decimal
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # client
    API_BASE_URL: str = "http://127.0.0.1:8000/api"
    REQUEST_TIMEOUT: Optional[float] = None
    DIAGNOSIS_TIMEOUT_SECONDS: float = 30.0
    SESSION_DATABASE_URL: str = "sqlite:///./session.db"
    LOG_LEVEL: str = "INFO"

    # pricing
    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("1000")
    SHIPPING_FLAT_FEE: Decimal = Decimal("60")
    TAX_RATE: Decimal = Decimal("0.05")
    CURRENCY_SYMBOL: str = "৳"

    # stub marketplace backend
    DATABASE_URL: str = "sqlite:///./dev.db"
    SECRET_KEY: str = "change-this-secret"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    TOKEN_TTL_SECONDS: int = 86400
    TOKEN_PURGE_INTERVAL_SECONDS: int = 300
    STUB_CART_RESPONSE_SHAPE: str = "nested"  # nested, flat, ack
    SEED_CATALOGUE: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
