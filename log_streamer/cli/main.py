# -----------------------------------------------------------------------------
# 파일명 : log_streamer/cli/main.py
# 목적   : CLI → 설정 로드/검증 → headless 실행 또는 FastAPI 서버 기동
# 사용   :
#   log-streamer --auth-key KEY --duration 30 --batch-size 10 --interval 1000
#   log-streamer --dry-run --profile burst
#   log-streamer --serve --auth-key KEY --port 8080
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import random
import sys

from faker import Faker

from ..core.config import Settings, load_settings
from ..core.logger import get_logger
from ..errors import ConfigError
from .args import build_parser, normalize_args, parse_args

_logger = get_logger("log_streamer.cli")


def _apply_seed(settings: Settings) -> None:
    if settings.seed is None:
        return
    random.seed(settings.seed)
    Faker.seed(settings.seed)
    _logger.info("[cli] random seed initialised: %d", settings.seed)


def _serve(settings: Settings) -> None:
    import uvicorn

    from ..main import create_app

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


def main(argv: list[str] | None = None) -> int:
    """
    엔트리 포인트.
    1) CLI 인자 파싱
    2) 프로파일 + 환경변수 + 오버라이드로 설정 구성, 1회 검증
    3) --serve 면 uvicorn, 아니면 run_headless
    """
    ns = parse_args(argv)
    profile, overrides = normalize_args(ns)

    try:
        settings = load_settings(profile, overrides).validate()
    except ConfigError as exc:
        _logger.error("[cli] invalid configuration: %s", exc)
        build_parser().print_usage(sys.stderr)
        return 1

    _logger.info(
        "[cli] destination=%s duration=%s batch_size=%s interval=%dms dry_run=%s",
        settings.destination,
        settings.duration_sec,
        settings.batch_size or f"{settings.batch_size_min}-{settings.batch_size_max}",
        settings.interval_ms,
        settings.dry_run,
    )
    _apply_seed(settings)

    if ns.serve:
        _serve(settings)
        return 0

    from ..run import run_headless

    asyncio.run(run_headless(settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
