"""log_streamer: 합성 로그 생성 → 라이브 스트림 fan-out → 배치 전송."""

__version__ = "0.1.0"
