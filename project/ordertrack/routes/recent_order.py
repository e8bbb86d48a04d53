# ordertrack/routes/recent_order.py

from fastapi import APIRouter, Query, Request, status
from typing import List
from ordertrack.config import settings
from ordertrack.schemas.base import ErrorResponse
from ordertrack.schemas.recent_order import RecentOrder, RecentOrderCreate
from ordertrack.services.recent_order import (
    read_recent_orders_service,
    create_recent_order_service,
)

router = APIRouter()

# ────────────── READ ALL ──────────────
@router.get(
    "",
    response_model=List[RecentOrder],
    status_code=status.HTTP_200_OK,
    summary="Недавно просмотренные заказы",
    response_description="Последние просмотры, самые свежие первыми",
    responses={
        200: {"description": "Список успешно получен"},
        400: {"model": ErrorResponse, "description": "Некорректный limit"},
        500: {"model": ErrorResponse, "description": "Внутренняя ошибка сервера"},
    },
)
async def read_recent_orders(
    request: Request,
    limit: int = Query(settings.RECENT_ORDERS_DEFAULT_LIMIT, ge=1, description="Сколько записей вернуть"),
):
    try:
        return await read_recent_orders_service(request, limit)
    except Exception as e:
        await request.app.state.log.log_error("recent_order", f"Ошибка при получении недавних заказов: {e}")
        raise


# ────────────── CREATE ──────────────
@router.post(
    "",
    response_model=RecentOrder,
    status_code=status.HTTP_201_CREATED,
    summary="Записать просмотр заказа",
    response_description="Возвращает созданную запись",
    responses={
        201: {"description": "Просмотр записан"},
        400: {"model": ErrorResponse, "description": "Неверные данные запроса"},
        500: {"model": ErrorResponse, "description": "Внутренняя ошибка сервера"},
    },
)
async def create_recent_order(
    request: Request,
    recent_order: RecentOrderCreate,
):
    try:
        return await create_recent_order_service(recent_order, request)
    except Exception as e:
        await request.app.state.log.log_error("recent_order", f"Ошибка при добавлении недавнего заказа: {e}")
        raise
