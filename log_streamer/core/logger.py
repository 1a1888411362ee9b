# -----------------------------------------------------------------------------
# 파일명 : log_streamer/core/logger.py
# 목적   : 모듈별 named logger에 StreamHandler를 한 번만 붙이는 헬퍼
# 설명   : 레벨은 LS_LOG_LEVEL 환경변수(기본 INFO)로 조정
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_LEVEL: str = os.getenv("LS_LOG_LEVEL", "INFO")


def get_logger(name: str) -> logging.Logger:
    """
    이름에 해당하는 logger를 반환한다. 핸들러가 없을 때만 StreamHandler를 붙인다.

    Args:
        name: logger 이름 (예: "log_streamer.controller")
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
