# ordertrack/services/recent_order.py

from typing import List
from fastapi import Request

from ordertrack.schemas.recent_order import RecentOrder, RecentOrderCreate
from ordertrack.services.store import OrderStore


async def read_recent_orders_service(request: Request, limit: int = 5) -> List[RecentOrder]:
    """
    Недавно просмотренные заказы, самые свежие первыми.
    """
    store: OrderStore = request.app.state.store
    recent = store.list_recent_orders(limit)
    await request.app.state.log.log_info("recent_order", f"{len(recent)} недавних заказов загружено")
    return recent


async def create_recent_order_service(recent_order: RecentOrderCreate, request: Request) -> RecentOrder:
    """
    Запись просмотра заказа, присланная клиентом.
    """
    store: OrderStore = request.app.state.store
    created = store.add_recent_order(recent_order.order_number, recent_order.viewed_at)
    await request.app.state.log.log_info("recent_order", "Недавний заказ добавлен", {
        "id": created.id, "order_number": created.order_number
    })
    return created
