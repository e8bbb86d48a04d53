# ordertrack/services/store.py

from itertools import count
from typing import Dict, List, Optional, Protocol
from datetime import datetime, timezone

from pydantic import ValidationError as PydanticValidationError

from ordertrack.schemas.order import Order, OrderCreate, OrderUpdate
from ordertrack.schemas.recent_order import RecentOrder
from ordertrack.utils.errors import ValidationError


class OrderSource(Protocol):
    async def fetch_by_order_number(self, order_number: str) -> Optional[OrderCreate]: ...

    async def fetch_all_by_phone_number(self, phone_number: str) -> List[OrderCreate]: ...


class OrderStore:
    """
    Кэш заказов в памяти процесса и список недавно просмотренных.

    Создаётся один раз при старте приложения (app.state.store).
    Блокировок нет: все изменения индекса выполняются без await внутри,
    а вставка идёт по принципу "вставить, если нет", поэтому два
    параллельных промаха по одному ключу получают один и тот же id.
    """

    def __init__(
        self,
        source: OrderSource,
        trust_cached_phone_lookups: bool = True,
        recent_orders_max: int = 10,
    ):
        self.source = source
        self.trust_cached_phone_lookups = trust_cached_phone_lookups
        self.recent_orders_max = recent_orders_max

        self.orders: Dict[int, Order] = {}
        self.recent_orders: List[RecentOrder] = []
        self._order_ids = count(1)
        self._recent_ids = count(1)

    # ==========================================================
    # ИНДЕКС ЗАКАЗОВ
    # ==========================================================
    def get_order(self, id: int) -> Optional[Order]:
        return self.orders.get(id)

    def find_by_order_number(self, order_number: str) -> Optional[Order]:
        return next((o for o in self.orders.values() if o.order_number == order_number), None)

    def find_by_airtable_id(self, airtable_id: str) -> Optional[Order]:
        return next((o for o in self.orders.values() if o.airtable_id == airtable_id), None)

    def find_by_phone_number(self, phone_number: str) -> List[Order]:
        return [o for o in self.orders.values() if o.phone_number == phone_number]

    def _insert(self, order: OrderCreate) -> Order:
        """Вставка, если заказа ещё нет (по номеру или id Airtable); иначе возвращает существующий."""
        existing = self.find_by_airtable_id(order.airtable_id) or self.find_by_order_number(order.order_number)
        if existing:
            return existing

        cached = Order(id=next(self._order_ids), **order.model_dump())
        self.orders[cached.id] = cached
        return cached

    def _upsert(self, order: OrderCreate) -> Order:
        """Обновляет закэшированный заказ свежими данными, сохраняя его id."""
        existing = self.find_by_airtable_id(order.airtable_id) or self.find_by_order_number(order.order_number)
        if existing is None:
            return self._insert(order)

        # номер мог уйти к другой записи Airtable: устаревший владелец номера удаляется
        holder = self.find_by_order_number(order.order_number)
        if holder and holder.id != existing.id:
            del self.orders[holder.id]

        refreshed = Order(id=existing.id, **order.model_dump())
        self.orders[existing.id] = refreshed
        return refreshed

    async def get_by_order_number(self, order_number: str) -> Optional[Order]:
        cached = self.find_by_order_number(order_number)
        if cached:
            return cached

        fetched = await self.source.fetch_by_order_number(order_number)
        if fetched is None:
            return None
        return self._insert(fetched)

    async def get_all_by_phone_number(self, phone_number: str) -> List[Order]:
        # TODO: подтвердить у владельца продукта, допустимо ли не обновлять
        # список по телефону, если в кэше уже есть хоть один его заказ
        if self.trust_cached_phone_lookups:
            cached = self.find_by_phone_number(phone_number)
            if cached:
                return cached

        fetched = await self.source.fetch_all_by_phone_number(phone_number)
        if self.trust_cached_phone_lookups:
            return [self._insert(order) for order in fetched]
        return [self._upsert(order) for order in fetched]

    def update_order(self, id: int, order_update: OrderUpdate) -> Optional[Order]:
        existing = self.orders.get(id)
        if existing is None:
            return None

        changes = order_update.model_dump(exclude_unset=True)

        new_number = changes.get("order_number")
        if new_number and new_number != existing.order_number:
            clash = self.find_by_order_number(new_number)
            if clash and clash.id != id:
                raise ValidationError(f"Order number '{new_number}' is already in use")

        new_airtable_id = changes.get("airtable_id")
        if new_airtable_id and new_airtable_id != existing.airtable_id:
            clash = self.find_by_airtable_id(new_airtable_id)
            if clash and clash.id != id:
                raise ValidationError(f"Airtable id '{new_airtable_id}' is already in use")

        try:
            updated = Order.model_validate({**existing.model_dump(), **changes, "id": id})
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid order data",
                details=e.errors(include_url=False, include_context=False),
            ) from e
        self.orders[id] = updated
        return updated

    # ==========================================================
    # НЕДАВНО ПРОСМОТРЕННЫЕ
    # ==========================================================
    def add_recent_order(self, order_number: str, viewed_at: Optional[datetime] = None) -> RecentOrder:
        """Заменяет прежнюю запись того же заказа и оставляет последние recent_orders_max."""
        recent = RecentOrder(
            id=next(self._recent_ids),
            order_number=order_number,
            viewed_at=viewed_at or datetime.now(timezone.utc),
        )

        self.recent_orders = [r for r in self.recent_orders if r.order_number != recent.order_number]
        self.recent_orders.append(recent)
        self.recent_orders.sort(key=lambda r: r.viewed_at, reverse=True)
        del self.recent_orders[self.recent_orders_max:]
        return recent

    def list_recent_orders(self, limit: int = 5) -> List[RecentOrder]:
        if limit <= 0:
            return []
        return sorted(self.recent_orders, key=lambda r: r.viewed_at, reverse=True)[:limit]
