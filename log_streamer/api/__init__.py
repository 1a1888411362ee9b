# -----------------------------------------------------------------------------
# 파일명 : log_streamer/api/__init__.py
# 목적   : FastAPI 서브모듈(control/stream) 라우터를 한 번에 노출
# 설명   : main.py 에서 from log_streamer.api import control, stream 형태로 사용
# -----------------------------------------------------------------------------

from . import control, stream

__all__ = ["control", "stream"]
