# ordertrack/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from dotenv import load_dotenv
from contextlib import asynccontextmanager

# --- загрузка переменных окружения до чтения настроек ---
load_dotenv()

from ordertrack.config import settings
from ordertrack.utils.log import Log
from ordertrack.utils.errors import register_exception_handlers
from ordertrack.services.airtable import AirtableClient
from ordertrack.services.store import OrderStore
from ordertrack.middleware.access_log import AccessLogMiddleware

# --- sync логгер для раннего старта ---
boot_log = Log(settings.LOG_DIR, settings.LOG_PRINT)
boot_log.log_info_sync(target="startup", message="Импорты main.py выполнены")

# ────────────── Lifespan ──────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    boot_log.log_info_sync(target="startup", message="lifespan: startup начат")

    app.state.log = Log(settings.LOG_DIR, settings.LOG_PRINT)

    # Один клиент Airtable и одно хранилище на процесс
    app.state.airtable = AirtableClient(log=app.state.log)
    app.state.store = OrderStore(
        app.state.airtable,
        trust_cached_phone_lookups=settings.PHONE_LOOKUP_TRUST_CACHE,
        recent_orders_max=settings.RECENT_ORDERS_MAX,
    )
    await app.state.log.log_info(target="startup", message="Хранилище заказов создано", data={
        "table": settings.AIRTABLE_TABLE_NAME,
        "trust_cached_phone_lookups": settings.PHONE_LOOKUP_TRUST_CACHE,
    })

    yield

    # shutdown
    await app.state.log.log_info(target="shutdown", message="Остановка приложения")
    await app.state.airtable.aclose()
    await app.state.log.shutdown()
    boot_log.log_info_sync(target="shutdown", message="Log корректно завершён")

# ────────────── Создаём FastAPI приложение ──────────────
app = FastAPI(title="Order Tracker API", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# журнал запросов
app.add_middleware(AccessLogMiddleware)

register_exception_handlers(app)

@app.get("/")
def read_root():
    return {"message": "Order Tracker API"}

# ────────────── Подключение роутов ──────────────
from ordertrack.routes import order, recent_order

app.include_router(order.router, prefix="/api/orders", tags=["orders"])
app.include_router(recent_order.router, prefix="/api/recent-orders", tags=["recent-orders"])

# ────────────── Запуск uvicorn ──────────────
if __name__ == "__main__":
    boot_log.log_info_sync(target="startup", message="Запуск uvicorn.run")
    uvicorn.run(
        "ordertrack.main:app",
        host="127.0.0.1",
        port=8000,
        log_level="info",
        reload=True
    )
