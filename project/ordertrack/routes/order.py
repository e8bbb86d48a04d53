# ordertrack/routes/order.py

from fastapi import APIRouter, Request, status
from typing import List
from ordertrack.schemas.base import ErrorResponse
from ordertrack.schemas.order import Order
from ordertrack.services.order import (
    read_order_by_number_service,
    read_orders_by_phone_service,
    read_order_by_phone_and_number_service,
)

router = APIRouter()

# Маршруты /phone/... объявлены раньше /{order_number}

# ────────────── READ BY PHONE ──────────────
@router.get(
    "/phone/{phone_number}",
    response_model=List[Order],
    status_code=status.HTTP_200_OK,
    summary="Получить заказы по номеру телефона",
    response_description="Возвращает все заказы, оформленные на телефон",
    responses={
        200: {"description": "Заказы найдены"},
        400: {"model": ErrorResponse, "description": "Не указан номер телефона"},
        404: {"model": ErrorResponse, "description": "Для телефона нет заказов"},
        500: {"model": ErrorResponse, "description": "Ошибка обращения к Airtable"},
    },
)
async def read_orders_by_phone(
    phone_number: str,
    request: Request,
):
    try:
        return await read_orders_by_phone_service(phone_number, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказов по телефону: {e}", {
            "phone_number": phone_number
        })
        raise


# ────────────── READ BY PHONE + NUMBER ──────────────
@router.get(
    "/phone/{phone_number}/{order_number}",
    response_model=Order,
    status_code=status.HTTP_200_OK,
    summary="Получить заказ телефона по номеру заказа",
    response_description="Возвращает один заказ из заказов телефона",
    responses={
        200: {"description": "Заказ найден"},
        400: {"model": ErrorResponse, "description": "Не указан номер телефона или заказа"},
        404: {"model": ErrorResponse, "description": "У телефона нет заказов или нет заказа с таким номером"},
        500: {"model": ErrorResponse, "description": "Ошибка обращения к Airtable"},
    },
)
async def read_order_by_phone_and_number(
    phone_number: str,
    order_number: str,
    request: Request,
):
    try:
        return await read_order_by_phone_and_number_service(phone_number, order_number, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказа телефона: {e}", {
            "phone_number": phone_number, "order_number": order_number
        })
        raise


# ────────────── READ BY NUMBER ──────────────
@router.get(
    "/{order_number}",
    response_model=Order,
    status_code=status.HTTP_200_OK,
    summary="Получить заказ по номеру",
    response_description="Возвращает заказ и записывает его в недавно просмотренные",
    responses={
        200: {"description": "Заказ найден и возвращён"},
        400: {"model": ErrorResponse, "description": "Не указан номер заказа"},
        404: {"model": ErrorResponse, "description": "Заказ не найден"},
        500: {"model": ErrorResponse, "description": "Ошибка обращения к Airtable"},
    },
)
async def read_order(
    order_number: str,
    request: Request,
):
    try:
        return await read_order_by_number_service(order_number, request)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при получении заказа: {e}", {
            "order_number": order_number
        })
        raise
