# -----------------------------------------------------------------------------
# 파일명 : log_streamer/schema.py
# 목적   : 생성 로그 이벤트(LogEvent)와 배치(Batch)의 표준 스키마
# 설명   :
#   - LogEvent는 생성 후 변경 불가(frozen). metadata도 읽기 전용 매핑으로 보관
#   - 카테고리와 무관한 필드는 None으로 두고 직렬화 시 생략한다(0 값은 유지)
#   - level / environment 는 허용 목록 밖이면 생성 시점에 ValueError
# -----------------------------------------------------------------------------

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

# 허용 목록
LOG_LEVELS: Tuple[str, ...] = ("INFO", "WARN", "ERROR", "DEBUG")
ENVIRONMENTS: Tuple[str, ...] = ("production", "staging", "development")

# 직렬화 순서 (필수 5키 → 카테고리별 선택 키)
REQUIRED_KEYS: Tuple[str, ...] = ("timestamp", "level", "service", "message", "environment")
OPTIONAL_KEYS: Tuple[str, ...] = (
    "status_code",
    "method",
    "path",
    "duration_ms",
    "user_id",
    "action",
    "metadata",
)


@dataclass(frozen=True)
class LogEvent:
    """
    합성 로그 이벤트 1건.

    Attributes:
        timestamp: ISO-8601 UTC 문자열 (예: "2025-11-05T07:55:10Z")
        level: INFO | WARN | ERROR | DEBUG
        service: 이벤트를 낸 서비스명
        message: 사람이 읽는 메시지
        environment: production | staging | development
        status_code, method, path, duration_ms: API/DB 카테고리용
        user_id, action: 사용자 활동/DB 카테고리용
        metadata: 카테고리별 상세(CPU/메모리, 브라우저/IP, 테이블/rows 등)
    """

    timestamp: str
    level: str
    service: str
    message: str
    environment: str
    status_code: Optional[int] = None
    method: Optional[str] = None
    path: Optional[str] = None
    duration_ms: Optional[int] = None
    user_id: Optional[str] = None
    action: Optional[str] = None
    metadata: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        if not self.timestamp:
            raise ValueError("timestamp must not be empty")
        if self.level not in LOG_LEVELS:
            raise ValueError(f"invalid level: {self.level!r}")
        if self.environment not in ENVIRONMENTS:
            raise ValueError(f"invalid environment: {self.environment!r}")
        if self.metadata is not None:
            # frozen이라 object.__setattr__로 읽기 전용 사본을 넣는다
            object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def to_dict(self) -> Dict[str, Any]:
        """None 필드를 뺀 dict. 키 순서는 REQUIRED_KEYS → OPTIONAL_KEYS."""
        data: Dict[str, Any] = {key: getattr(self, key) for key in REQUIRED_KEYS}
        for key in OPTIONAL_KEYS:
            value = getattr(self, key)
            if value is None:
                continue
            if key == "metadata":
                value = dict(value)
            data[key] = value
        return data

    def to_json(self) -> str:
        """전송용 JSON 문자열. 직렬화 불가 값이 있으면 TypeError/ValueError."""
        return json.dumps(self.to_dict(), ensure_ascii=False, allow_nan=False)


@dataclass(frozen=True)
class Batch:
    """한 generator tick에서 만들어진 이벤트 묶음. 싱크로 통째로 넘어간다."""

    category: str
    events: Tuple[LogEvent, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.events)

    def to_list(self) -> List[Dict[str, Any]]:
        return [event.to_dict() for event in self.events]

    def to_json(self) -> str:
        """이벤트 순서를 유지한 단일 JSON 배열."""
        return json.dumps(self.to_list(), ensure_ascii=False, allow_nan=False)
