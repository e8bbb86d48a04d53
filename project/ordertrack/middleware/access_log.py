# ordertrack/middleware/access_log.py

import time


class AccessLogMiddleware:
    """Пишет в app.state.log одну строку на HTTP-запрос: метод, путь, статус, время."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        # до ответа статус неизвестен; 500, если приложение упало раньше
        response_status = {"code": 500}

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                response_status["code"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            log = getattr(scope["app"].state, "log", None) if "app" in scope else None
            if log:
                await log.log_info("access", f"{scope['method']} {scope['path']}", {
                    "status": response_status["code"],
                    "ms": round((time.perf_counter() - started) * 1000, 1),
                }, is_console=False)
