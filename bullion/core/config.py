from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List
import os


class Config(BaseSettings):
    # Database Configuration (SQLite via aiosqlite by default, PostgreSQL via asyncpg)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/bullion.db", alias="DB_URL"
    )
    db_echo: bool = Field(default=False, alias="DB_ECHO")

    # JWT Configuration (tokens are issued by the auth service)
    jwt_secret: str = Field(default="", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    # Sequential identifiers: 3-letter prefix + zero-padded number
    draft_number_prefix: str = Field(default="DRF", alias="DRAFT_NUMBER_PREFIX")
    ledger_id_prefix: str = Field(default="TXN", alias="LEDGER_ID_PREFIX")
    transfer_id_prefix: str = Field(default="FTR", alias="TRANSFER_ID_PREFIX")
    sequence_pad_width: int = Field(default=3, alias="SEQUENCE_PAD_WIDTH")
    sequence_max_retries: int = Field(default=5, alias="SEQUENCE_MAX_RETRIES")
    sequence_scan_limit: int = Field(default=10, alias="SEQUENCE_SCAN_LIMIT")

    # Ledger defaults
    default_currency_code: str = Field(default="AED", alias="DEFAULT_CURRENCY_CODE")
    draft_cost_center: str = Field(default="DRAFT", alias="DRAFT_COST_CENTER")
    default_stock_cost_center: str = Field(
        default="GOLD_STOCK", alias="DEFAULT_STOCK_COST_CENTER"
    )

    cors_origins: List[str] = Field(
        default=["http://localhost", "http://localhost:5173"], alias="CORS_ORIGINS"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    is_production: bool = (
        os.getenv("ENVIRONMENT", "development").lower() == "production"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True


# Instantiate the settings
config = Config()
