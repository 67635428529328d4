"""
Logging для typedunits (Loguru).

Библиотека не пишет логи, пока приложение не включит их явно:
пакет отключается в loguru при импорте, enable_logging() включает обратно.

Exports:
    - logger: глобальный Loguru logger
    - enable_logging / disable_logging
    - setup_logfile: файл с ротацией
"""

import sys
from typing import Any

from loguru import logger

__all__ = [
    "logger",
    "enable_logging",
    "disable_logging",
    "setup_logfile",
]

_PACKAGE = "typedunits"


def enable_logging(level: str = "DEBUG", sink: Any = sys.stderr) -> int:
    """
    Включить логи typedunits и добавить sink.

    Args:
        level: Уровень (DEBUG, INFO, ...)
        sink: Куда писать (поток, путь, callable)

    Returns:
        id handler'а для logger.remove()
    """
    logger.enable(_PACKAGE)
    return logger.add(
        sink,
        level=level.upper(),
        filter=_PACKAGE,
    )


def disable_logging() -> None:
    logger.disable(_PACKAGE)


def setup_logfile(
    log_path: str,
    rotation: str = "10 MB",
    retention: str = "10 days",
    level: str = "DEBUG",
) -> int:
    """
    Файловый лог с ротацией.

    Args:
        log_path: Путь к файлу
        rotation: Размер/время для ротации
        retention: Сколько хранить старые файлы
        level: Уровень логирования
    """
    logger.enable(_PACKAGE)
    handler_id = logger.add(
        log_path,
        rotation=rotation,
        retention=retention,
        level=level.upper(),
        filter=_PACKAGE,
        enqueue=True,
    )
    logger.info(f"typedunits file logging initialized: {log_path}")
    return handler_id
