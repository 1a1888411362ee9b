# log_streamer/simulator/build_simulators.py

from __future__ import annotations
from typing import Dict

from . import REGISTRY
from .base import BaseCategorySimulator
from ..core.config import Settings


def build_simulators(settings: Settings) -> Dict[str, BaseCategorySimulator]:
    """설정의 배치 크기 옵션으로 카테고리별 시뮬레이터 인스턴스 생성."""
    return {
        category: cls(
            batch_size=settings.batch_size,
            batch_size_range=(settings.batch_size_min, settings.batch_size_max),
        )
        for category, cls in REGISTRY.items()
    }
