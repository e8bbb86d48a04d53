# ordertrack/schemas/recent_order.py

from datetime import datetime, timezone
from pydantic import Field, field_validator

from ordertrack.schemas.base import CamelModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecentOrderCreate(CamelModel):
    order_number: str = Field(..., min_length=1, description="Номер просмотренного заказа")
    viewed_at: datetime = Field(default_factory=utc_now, description="Время просмотра (по умолчанию текущее)")

    @field_validator("order_number")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("orderNumber must not be blank")
        return value

    @field_validator("viewed_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # наивное время считаем UTC, иначе сортировка упадёт на сравнении
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class RecentOrder(RecentOrderCreate):
    id: int
