# ordertrack/config.py

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    AIRTABLE_API_KEY: str = Field(..., min_length=1)   # bearer-токен Airtable, только из окружения
    AIRTABLE_BASE_ID: str = Field(..., min_length=1)
    AIRTABLE_TABLE_NAME: str = "Orders"
    AIRTABLE_API_URL: str = "https://api.airtable.com/v0"

    # колонки Airtable, по которым строится filterByFormula
    AIRTABLE_ORDER_NUMBER_FIELD: str = "Order Number"
    AIRTABLE_PHONE_NUMBER_FIELD: str = "Phone Number"

    # True: если в кэше есть хоть один заказ с телефоном, Airtable не опрашиваем
    PHONE_LOOKUP_TRUST_CACHE: bool = True

    RECENT_ORDERS_MAX: int = 10
    RECENT_ORDERS_DEFAULT_LIMIT: int = 5

    LOG_DIR: str = "ordertrack/log"
    LOG_PRINT: str = "1"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
