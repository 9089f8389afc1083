"""
Единая настройка логирования для ядра корзины и Streamlit-приложения.

setup_logging() вызывается один раз в точке входа (app/main.py),
модули получают логгер через get_logger(__name__).
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """
    Настраивает корневой логгер: вывод в stdout, общий формат.
    Шумные логгеры Streamlit понижены до WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("streamlit").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
