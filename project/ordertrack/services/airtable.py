# ordertrack/services/airtable.py

"""
Адаптер к Airtable: поиск заказов по номеру заказа или телефону.

Один GET на вызов, без повторов и без собственного кэша (кэш живёт в OrderStore).
Каждая запись разбирается в RecordResult (order | error), исключения наружу
из разбора не летят: одиночный поиск превращает ошибку в AdapterError,
поиск по телефону пропускает битую запись с предупреждением в лог.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from ordertrack.config import settings
from ordertrack.schemas.airtable import AirtableListResponse, AirtableRecord
from ordertrack.schemas.order import OrderCreate, OrderStatus, PaymentStatus
from ordertrack.utils.errors import AdapterError

# Колонки Airtable → поля заказа.
# Номер заказа и телефон берутся из настроек (AIRTABLE_*_FIELD).
AIRTABLE_FIELD_MAP = {
    "recipient_name": "Recipient Name",
    "email": "Email",
    "total_price": "Total Price",
    "order_items_summary": "Order Items Summary",
    "order_status": "Order Status",
    "payment_status": "Payment Status",
    "receipt_link": "Receipt Link",
    "remark": "Remark",
    "tracking_updates": "Tracking Updates",
}

DEFAULT_TRACKING_STATUS = "Order Received"
DEFAULT_TRACKING_ICON = "check"


def default_tracking_updates(record: AirtableRecord) -> list[dict]:
    """Одна запись "Order Received" со временем создания строки в Airtable."""
    moment = None
    if record.created_time:
        try:
            moment = datetime.fromisoformat(record.created_time.replace("Z", "+00:00"))
        except ValueError:
            moment = None
    if moment is None:
        moment = datetime.now(timezone.utc)

    return [{
        "status": DEFAULT_TRACKING_STATUS,
        "date": f"{moment:%d %b %Y, %H:%M}",
        "timestamp": moment.isoformat(),
        "icon": DEFAULT_TRACKING_ICON,
    }]


# Значения для пустых или отсутствующих колонок.
# Поля без записи здесь (номер заказа, телефон) обязательны.
ORDER_FIELD_DEFAULTS = {
    "recipient_name": "",
    "email": "",
    "total_price": "0",
    "order_items_summary": "",
    "order_status": OrderStatus.FINALIZED,
    "payment_status": PaymentStatus.NO_PAYMENT,
    "receipt_link": None,
    "remark": None,
    "tracking_updates": default_tracking_updates,
}


@dataclass
class RecordResult:
    order: Optional[OrderCreate] = None
    error: Optional[str] = None
    airtable_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.order is not None


def _describe(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()
    )


def parse_record(
    raw: Any,
    order_number_field: str,
    phone_number_field: str,
) -> RecordResult:
    """Проверяет запись Airtable и переводит её в OrderCreate."""
    try:
        record = AirtableRecord.model_validate(raw)
    except PydanticValidationError as e:
        return RecordResult(error=f"record: {_describe(e)}")

    columns = {
        "order_number": order_number_field,
        "phone_number": phone_number_field,
        **AIRTABLE_FIELD_MAP,
    }

    data = {"airtable_id": record.id}
    for name, column in columns.items():
        value = record.fields.get(column)
        if value is None or value == "":
            if name not in ORDER_FIELD_DEFAULTS:
                continue  # обязательное поле, пусть упадёт на валидации
            default = ORDER_FIELD_DEFAULTS[name]
            value = default(record) if callable(default) else default
        data[name] = value

    # long text колонка: JSON-массив строкой
    if isinstance(data["tracking_updates"], str):
        try:
            data["tracking_updates"] = json.loads(data["tracking_updates"])
        except ValueError as e:
            return RecordResult(error=f"trackingUpdates: invalid JSON ({e})", airtable_id=record.id)

    # пустой массив равносилен отсутствию истории
    if data["tracking_updates"] == []:
        data["tracking_updates"] = default_tracking_updates(record)

    # ключи-алиасы: ошибки валидации всегда называют поле в camelCase
    aliased = {OrderCreate.model_fields[name].alias or name: value for name, value in data.items()}

    try:
        order = OrderCreate.model_validate(aliased)
    except PydanticValidationError as e:
        return RecordResult(error=_describe(e), airtable_id=record.id)

    return RecordResult(order=order, airtable_id=record.id)


class AirtableClient:
    """
    Клиент таблицы заказов Airtable.
    Держит один httpx.AsyncClient на процесс; закрывается через aclose().
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_id: str | None = None,
        table_name: str | None = None,
        api_url: str | None = None,
        order_number_field: str | None = None,
        phone_number_field: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        log=None,
    ):
        self.base_id = base_id or settings.AIRTABLE_BASE_ID
        self.table_name = table_name or settings.AIRTABLE_TABLE_NAME
        self.order_number_field = order_number_field or settings.AIRTABLE_ORDER_NUMBER_FIELD
        self.phone_number_field = phone_number_field or settings.AIRTABLE_PHONE_NUMBER_FIELD
        self.log = log

        self.client = httpx.AsyncClient(
            base_url=api_url or settings.AIRTABLE_API_URL,
            headers={
                "Authorization": f"Bearer {api_key or settings.AIRTABLE_API_KEY}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    @property
    def table_path(self) -> str:
        return f"/{quote(self.base_id, safe='')}/{quote(self.table_name, safe='')}"

    @staticmethod
    def filter_formula(field: str, value: str) -> str:
        """{Order Number}="A-100" с экранированием кавычек и обратных слэшей."""
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'{{{field}}}="{escaped}"'

    async def list_records(self, field: str, value: str) -> List[Any]:
        formula = self.filter_formula(field, value)
        try:
            response = await self.client.get(self.table_path, params={"filterByFormula": formula})
        except httpx.HTTPError as e:
            raise AdapterError(f"request failed: {e!r}") from e

        if not response.is_success:
            raise AdapterError(response.reason_phrase, response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise AdapterError("response is not JSON", response.status_code) from e

        try:
            payload = AirtableListResponse.model_validate(body)
        except PydanticValidationError as e:
            raise AdapterError(f"schema mismatch: {_describe(e)}", response.status_code) from e

        if self.log:
            await self.log.log_info("airtable", "Ответ Airtable получен", {
                "filter": formula, "records": len(payload.records)
            })
        return payload.records

    async def fetch_by_order_number(self, order_number: str) -> Optional[OrderCreate]:
        """Первый заказ с таким номером или None, если Airtable ничего не нашёл."""
        records = await self.list_records(self.order_number_field, order_number)
        if not records:
            return None

        result = parse_record(records[0], self.order_number_field, self.phone_number_field)
        if not result.ok:
            raise AdapterError(f"schema mismatch: {result.error}")
        return result.order

    async def fetch_all_by_phone_number(self, phone_number: str) -> List[OrderCreate]:
        """Все корректные заказы по телефону; битые записи пропускаются."""
        records = await self.list_records(self.phone_number_field, phone_number)

        orders = []
        for raw in records:
            result = parse_record(raw, self.order_number_field, self.phone_number_field)
            if result.ok:
                orders.append(result.order)
            elif self.log:
                await self.log.log_warning("airtable", "Запись Airtable пропущена", {
                    "airtable_id": result.airtable_id, "error": result.error
                })
        return orders

    async def aclose(self):
        await self.client.aclose()
