# -----------------------------------------------------------------------------
# 파일명 : event_sink/logger.py
# 목적   : 모듈별 로거에 공통 StreamHandler/포맷을 한 번만 붙인다
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def get_logger(name: str, level: Optional[int | str] = None) -> logging.Logger:
    """이름 기반 로거를 반환하고 핸들러가 없으면 기본 핸들러를 연결한다."""
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def set_level(level: int | str) -> None:
    """event_sink.* 로거 전체의 레벨을 바꾼다."""
    if isinstance(level, str):
        level = level.strip().upper()
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name == "event_sink" or name.startswith("event_sink."):
            if isinstance(logger, logging.Logger):
                logger.setLevel(level)
