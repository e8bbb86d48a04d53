# ordertrack/services/order.py

from typing import List
from fastapi import Request

from ordertrack.schemas.order import Order
from ordertrack.services.store import OrderStore
from ordertrack.utils.errors import OrderNotFoundError, ValidationError

NO_PHONE_ORDERS_MESSAGE = "No orders found for this phone number"


def _require(value: str, message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(message)
    return value


async def _remember_view(order: Order, request: Request):
    store: OrderStore = request.app.state.store
    recent = store.add_recent_order(order.order_number)
    await request.app.state.log.log_info("recent_order", "Просмотр заказа записан", {
        "order_number": recent.order_number, "viewed_at": recent.viewed_at
    })


async def read_order_by_number_service(order_number: str, request: Request) -> Order:
    """
    Заказ по номеру: сначала кэш, при промахе Airtable.
    Успешный просмотр попадает в список недавних.
    """
    order_number = _require(order_number, "Order number is required")
    store: OrderStore = request.app.state.store
    log = request.app.state.log

    order = await store.get_by_order_number(order_number)
    if order is None:
        await log.log_warning("order", "Заказ не найден", {"order_number": order_number})
        raise OrderNotFoundError()

    await log.log_info("order", "Заказ загружен", {"order_number": order_number, "id": order.id})
    await _remember_view(order, request)
    return order


async def read_orders_by_phone_service(phone_number: str, request: Request) -> List[Order]:
    """
    Все заказы по номеру телефона.
    """
    phone_number = _require(phone_number, "Phone number is required")
    store: OrderStore = request.app.state.store
    log = request.app.state.log

    orders = await store.get_all_by_phone_number(phone_number)
    if not orders:
        await log.log_warning("order", "Заказы по телефону не найдены", {"phone_number": phone_number})
        raise OrderNotFoundError(NO_PHONE_ORDERS_MESSAGE)

    await log.log_info("order", f"{len(orders)} заказов загружено по телефону", {"phone_number": phone_number})
    return orders


async def read_order_by_phone_and_number_service(phone_number: str, order_number: str, request: Request) -> Order:
    """
    Один заказ из списка заказов телефона.
    404, если у телефона нет заказов или среди них нет нужного номера.
    """
    order_number = _require(order_number, "Order number is required")
    orders = await read_orders_by_phone_service(phone_number, request)

    order = next((o for o in orders if o.order_number == order_number), None)
    if order is None:
        await request.app.state.log.log_warning("order", "Заказ не найден среди заказов телефона", {
            "phone_number": phone_number, "order_number": order_number
        })
        raise OrderNotFoundError()

    await _remember_view(order, request)
    return order
