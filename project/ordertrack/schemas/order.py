# ordertrack/schemas/order.py

from enum import Enum
from typing import List, Optional
from pydantic import computed_field, field_validator

from ordertrack.schemas.base import CamelModel


class OrderStatus(str, Enum):
    FINALIZED = "FINALIZED"
    CANCELED = "CANCELED"
    EXPIRED = "EXPIRED"


class PaymentStatus(str, Enum):
    NO_PAYMENT = "NO_PAYMENT"
    PENDING = "PENDING"
    PAID = "PAID"
    REFUND = "REFUND"
    PAYMENT_LS_RLP = "PAYMENT_LS_RLP"                    # оплачено через платёжного провайдера
    PAYMENT_LS_QR_PROMPTPAY = "PAYMENT_LS_QR_PROMPTPAY"  # оплачено QR PromptPay

    @property
    def is_paid(self) -> bool:
        return self in PAID_STATUSES


PAID_STATUSES = frozenset({
    PaymentStatus.PAID,
    PaymentStatus.PAYMENT_LS_RLP,
    PaymentStatus.PAYMENT_LS_QR_PROMPTPAY,
})


class TrackingUpdate(CamelModel):
    status: str
    date: str          # для показа: "12 May 2025, 10:30"
    timestamp: str     # ISO-время события
    icon: str = "check"


# ────────────── Базовая схема ──────────────
class OrderBase(CamelModel):
    order_number: str
    airtable_id: str
    recipient_name: str
    phone_number: str
    email: str
    total_price: str
    order_items_summary: str
    order_status: OrderStatus
    payment_status: PaymentStatus
    receipt_link: Optional[str] = None
    remark: Optional[str] = None
    tracking_updates: List[TrackingUpdate]

    @field_validator("total_price", "phone_number", "order_number", mode="before")
    @classmethod
    def number_to_str(cls, value):
        # Airtable отдаёт number/currency-колонки числом
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


# ────────────── Схема для CREATE (из Airtable) ──────────────
class OrderCreate(OrderBase):
    pass


# ────────────── Схема для частичного обновления ──────────────
class OrderUpdate(CamelModel):
    order_number: Optional[str] = None
    airtable_id: Optional[str] = None
    recipient_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    total_price: Optional[str] = None
    order_items_summary: Optional[str] = None
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    receipt_link: Optional[str] = None
    remark: Optional[str] = None
    tracking_updates: Optional[List[TrackingUpdate]] = None


# ────────────── Схема для RESPONSE ──────────────
class Order(OrderBase):
    id: int

    @computed_field(alias="isPaid")
    @property
    def is_paid(self) -> bool:
        return self.payment_status.is_paid
