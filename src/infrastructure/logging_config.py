"""Structured Logging Configuration"""
from __future__ import annotations

import logging
from functools import lru_cache

import structlog


@lru_cache()
def configure_logging(log_level: str = "INFO") -> None:
    """構造化ログを設定

    Lambda では stdout がそのまま CloudWatch Logs に送られる。
    ログレベルごとに一度だけ設定する (コールドスタート時)。
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
    )
