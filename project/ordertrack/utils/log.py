# ordertrack/utils/log.py
# Логирование событий

import os
import datetime
import enum
import logging
from aiologger import Logger
from aiologger.handlers.files import AsyncFileHandler

class Log:
    """
    Журнал приложения. Все цели (target) пишут в один файл на день:
    {log_dir}/2025/10/04.log, строка вида
    "04.10.2025 12:00:00 order: Заказ загружен: {...}".
    """

    def __init__(self, log_dir: str | None = None, log_print: str | None = None):
        self.log_dir = log_dir or os.getenv("LOG_DIR", "ordertrack/log")
        os.makedirs(self.log_dir, exist_ok=True)
        self.loggers = {}
        if log_print is None:
            log_print = os.getenv("LOG_PRINT", "0")
        self.log_print = str(log_print).lower() in ("1", "true", "yes")

    def build_log_path(self, now: datetime.datetime) -> str:
        base_dir = os.path.join(self.log_dir, f"{now.year}", f"{now:%m}")
        os.makedirs(base_dir, exist_ok=True)
        return os.path.join(base_dir, f"{now:%d}.log")

    def format_line(self, target: str, message: str, data: dict | None, now: datetime.datetime) -> str:
        line = f"{now:%d.%m.%Y %H:%M:%S} {target}: {message}"
        if data:
            line += f": {self.safe_serialize(data)}"
        return line

    async def get_logger(self, now: datetime.datetime) -> Logger:
        """Асинхронный логгер текущего дня; при смене даты старый закрывается."""
        log_path = self.build_log_path(now)

        if log_path not in self.loggers:
            # новый логгер кладётся до первого await, старые закрываются после
            stale = [self.loggers.pop(path) for path in list(self.loggers)]

            handler = AsyncFileHandler(filename=log_path, mode="a", encoding="utf-8")
            day_logger = Logger(name=f"ordertrack_{now:%Y%m%d}")
            day_logger.add_handler(handler)
            self.loggers[log_path] = day_logger

            for old_logger in stale:
                await old_logger.shutdown()

        return self.loggers[log_path]

    # Асинхронное
    async def log_info(
        self,
        target: str = "",
        message: str = "",
        data: dict | None = None,
        is_console: bool = None,
    ):
        now = datetime.datetime.now()
        line = self.format_line(target, message, data, now)

        day_logger = await self.get_logger(now)
        await day_logger.info(line)

        should_print = self.log_print if is_console is None else is_console
        if should_print:
            print(line)

    async def log_warning(self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None):
        await self.log_info(target, f"WARNING: {message}", data, is_console)

    async def log_error(
        self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None
    ):
        await self.log_info(target, f"ERROR: {message}", data, is_console)

    # Синхронное, для старта и остановки, когда цикла событий ещё/уже нет
    def log_info_sync(
        self, target: str = "", message: str = "", data: dict | None = None, is_console: bool = None
    ):
        now = datetime.datetime.now()
        log_path = self.build_log_path(now)
        line = self.format_line(target, message, data, now)

        logger = logging.getLogger(f"ordertrack_sync_{now:%Y%m%d}")
        logger.setLevel(logging.INFO)
        logger.propagate = False

        if not logger.handlers:
            handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)

        logger.info(line)

        should_print = self.log_print if is_console is None else is_console
        if should_print:
            print(line)

    def safe_serialize(self, obj):
        """
        Приводит объект к виду, пригодному для строки лога:
        - dict, list, tuple рекурсивно
        - Pydantic модели через model_dump
        - datetime в ISO, Enum в значение
        - прочее → строка с типом
        """
        if obj is None:
            return None
        elif isinstance(obj, enum.Enum):
            return obj.value
        elif isinstance(obj, (str, int, float, bool)):
            return obj
        elif isinstance(obj, (datetime.datetime, datetime.date)):
            return obj.isoformat()
        elif isinstance(obj, dict):
            return {k: self.safe_serialize(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple, set)):
            return [self.safe_serialize(v) for v in obj]
        elif hasattr(obj, "model_dump"):  # Pydantic
            return self.safe_serialize(obj.model_dump())
        else:
            return f"<{type(obj).__name__}>"

    async def shutdown(self):
        for day_logger in list(self.loggers.values()):
            await day_logger.shutdown()
        self.loggers = {}
