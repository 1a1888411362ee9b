# -----------------------------------------------------------------------------
# 파일명 : log_streamer/cli/args.py
# 목적   : 로그 생성기 실행을 위한 커맨드라인 인자 정의/파싱
# 사용   :
#   from log_streamer.cli.args import parse_args, normalize_args
#   ns = parse_args()
#   profile, overrides = normalize_args(ns)
#
# 주요 옵션:
#   --profile      : 프로파일 이름 또는 YAML 경로 (기본 baseline)
#   --auth-key     : 수집 엔드포인트 인증 키 (필수. dry-run 제외)
#   --duration     : 실행 시간(초). 0 이면 시그널로만 종료
#   --destination  : 수집 엔드포인트 URL
#   --batch-size   : tick 당 고정 배치 크기 (미지정 시 프로파일 범위 내 랜덤)
#   --interval     : 배치 간격(ms)
#   --dry-run      : HTTP 전송 없이 stdout 으로 출력
#   --serve        : FastAPI 대시보드 서버로 실행 (/start /stop /ws)
# -----------------------------------------------------------------------------

from __future__ import annotations
import argparse
from typing import Any, Dict, Optional, Tuple

from ..core.config import DEFAULT_PROFILE


def build_parser() -> argparse.ArgumentParser:
    """
    argparse.ArgumentParser 인스턴스를 구성해 반환한다.
    프로파일/환경변수 값을 덮어쓰지 않도록 값 옵션의 기본값은 모두 None.
    """
    p = argparse.ArgumentParser(
        prog="log-streamer",
        description="Generate synthetic api/db/user/metrics logs, stream them live and ship batches.",
    )

    p.add_argument(
        "--profile",
        type=str,
        default=None,
        help=f"프로파일 이름 또는 YAML 경로 (기본: {DEFAULT_PROFILE})",
    )
    p.add_argument(
        "--auth-key",
        dest="auth_key",
        type=str,
        default=None,
        help="수집 엔드포인트 인증 키 (환경변수 LS_AUTH_KEY 로도 지정 가능)",
    )
    p.add_argument(
        "--duration",
        type=float,
        default=None,
        help="실행 시간(초). 0 이면 자동 종료 없음.",
    )
    p.add_argument(
        "--destination",
        type=str,
        default=None,
        help="로그 수집 엔드포인트 URL",
    )
    p.add_argument(
        "--batch-size",
        dest="batch_size",
        type=int,
        default=None,
        help="tick 당 고정 배치 크기",
    )
    p.add_argument(
        "--interval",
        type=int,
        default=None,
        help="배치 간격(ms)",
    )
    p.add_argument(
        "--log-interval",
        dest="log_interval",
        type=float,
        default=None,
        help="통계 로그 간격(초)",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="random/Faker 시드 (재현용)",
    )

    # 실행 옵션
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="HTTP 전송 없이 stdout 으로 배치 출력. 인증 키 불필요.",
    )
    p.add_argument(
        "--serve",
        action="store_true",
        help="FastAPI 서버로 실행 (POST /start, POST /stop, WS /ws).",
    )
    p.add_argument("--host", type=str, default=None, help="--serve 바인드 주소")
    p.add_argument("--port", type=int, default=None, help="--serve 포트")

    return p


def normalize_args(ns: argparse.Namespace) -> Tuple[Optional[str], Dict[str, Any]]:
    """
    파싱 결과를 load_settings() 에 바로 넘길 수 있게 정규화한다.

    Returns:
        (profile, overrides) 튜플. overrides 에서 None 값은 load_settings 가 무시한다
    """
    overrides: Dict[str, Any] = {
        "auth_key": ns.auth_key,
        "duration_sec": ns.duration,
        "destination": ns.destination,
        "batch_size": ns.batch_size,
        "interval_ms": ns.interval,
        "log_interval_sec": ns.log_interval,
        "seed": ns.seed,
        "host": ns.host,
        "port": ns.port,
    }
    if ns.dry_run:
        overrides["dry_run"] = True
    return ns.profile, overrides


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Args:
        argv: 테스트/주입용 인자 리스트. None이면 sys.argv 사용.
    """
    parser = build_parser()
    return parser.parse_args(argv)
