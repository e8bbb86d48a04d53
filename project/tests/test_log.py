# tests/test_log.py

import asyncio
import datetime

import pytest

from ordertrack.utils.log import Log


def test_log_print_flag(tmp_path):
    assert Log(str(tmp_path), log_print="1").log_print is True
    assert Log(str(tmp_path), log_print="yes").log_print is True
    assert Log(str(tmp_path), log_print="0").log_print is False


def test_build_log_path_is_daily(tmp_path):
    log = Log(str(tmp_path), log_print="0")

    path = log.build_log_path(datetime.datetime(2025, 5, 1, 12, 0))

    assert path == str(tmp_path / "2025" / "05" / "01.log")


@pytest.mark.asyncio
async def test_log_info_writes_line(tmp_path):
    log = Log(str(tmp_path), log_print="0")

    await log.log_info("order", "Заказ загружен", {"id": 1})
    await log.shutdown()

    with open(log.build_log_path(datetime.datetime.now()), encoding="utf-8") as f:
        content = f.read()
    assert "order: Заказ загружен: {'id': 1}" in content


@pytest.mark.asyncio
async def test_day_change_leaves_single_logger(tmp_path):
    log = Log(str(tmp_path), log_print="0")
    await log.get_logger(datetime.datetime(2025, 5, 1, 23, 59))

    next_day = datetime.datetime(2025, 5, 2, 0, 0)
    first, second = await asyncio.gather(log.get_logger(next_day), log.get_logger(next_day))

    assert first is second
    assert list(log.loggers.values()) == [first]
    await log.shutdown()
