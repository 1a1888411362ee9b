# -----------------------------------------------------------------------------
# 파일명 : log_streamer/core/config.py
# 목적   : 프로파일(YAML) + 환경변수(LS_*) + CLI 오버라이드를 합쳐 실행 설정(Settings) 구성
# 사용   : cli/main.py 가 load_settings() 후 settings.validate() 로 시작 시점 1회 검증
# 우선순위: 프로파일 < 환경변수 < CLI 오버라이드
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional
from pathlib import Path
import os
import yaml

from ..errors import ConfigError

# ===== 리소스 파일 경로 =====
THIS_FILE = Path(__file__).resolve()
APP_DIR = THIS_FILE.parents[1]  # 앱 루트: log_streamer/
PROFILES_DIR = APP_DIR / "profiles"

DEFAULT_PROFILE = "baseline"
DEFAULT_DESTINATION = "https://ingestion.easylogs.co/logs"
OVERFLOW_POLICIES = ("drop_oldest", "drop_new")

# 환경변수 → Settings 필드, 변환 함수
ENV_VARS: Dict[str, tuple] = {
    "LS_AUTH_KEY": ("auth_key", str),
    "LS_DESTINATION": ("destination", str),
    "LS_DURATION_SEC": ("duration_sec", float),
    "LS_BATCH_SIZE": ("batch_size", int),
    "LS_INTERVAL_MS": ("interval_ms", int),
    "LS_SINK_TIMEOUT_SEC": ("sink_timeout_sec", float),
    "LS_SUBSCRIBER_QUEUE_SIZE": ("subscriber_queue_size", int),
    "LS_OVERFLOW_POLICY": ("overflow_policy", str),
    "LS_HOST": ("host", str),
    "LS_PORT": ("port", int),
}


def load_profile(profile_path: str | Path) -> Dict[str, Any]:
    """
    YAML 프로파일을 로드한다.

    Args:
        profile_path: profiles/*.yaml 경로

    Returns:
        Dict[str, Any]: interval_ms, batch_size, batch_size_range, duration_sec 등 포함
    """
    path = Path(profile_path)
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"profile must be a mapping: {path}")
    return data


def resolve_profile_path(profile: str | Path | None) -> Path:
    """프로파일 이름(baseline) 또는 경로를 실제 파일 경로로 바꾼다."""
    if profile is None:
        return PROFILES_DIR / f"{DEFAULT_PROFILE}.yaml"
    path = Path(profile)
    if path.suffix in (".yaml", ".yml"):
        return path
    return PROFILES_DIR / f"{path.name}.yaml"


@dataclass(frozen=True)
class Settings:
    auth_key: Optional[str] = None
    destination: str = DEFAULT_DESTINATION
    duration_sec: Optional[float] = 60.0
    batch_size: Optional[int] = None
    batch_size_min: int = 2
    batch_size_max: int = 5
    interval_ms: int = 1000
    sink_timeout_sec: float = 10.0
    subscriber_queue_size: int = 100
    send_timeout_sec: float = 5.0
    overflow_policy: str = "drop_oldest"
    dry_run: bool = False
    log_interval_sec: float = 5.0
    host: str = "0.0.0.0"
    port: int = 8080
    seed: Optional[int] = None

    @property
    def interval_sec(self) -> float:
        return self.interval_ms / 1000.0

    def validate(self) -> "Settings":
        """
        시작 시점 1회 검증. 문제가 있으면 ConfigError.
        dry-run(stdout 싱크)일 때만 auth_key 없이 통과한다.
        """
        if not self.dry_run and not self.auth_key:
            raise ConfigError("Authentication key is required")
        if not self.dry_run and not self.destination.startswith(("http://", "https://")):
            raise ConfigError(f"destination must be an http(s) URL: {self.destination!r}")
        if self.interval_ms <= 0:
            raise ConfigError("interval_ms must be > 0")
        if self.batch_size is not None and self.batch_size < 1:
            raise ConfigError("batch_size must be >= 1")
        if self.batch_size_min < 1 or self.batch_size_min > self.batch_size_max:
            raise ConfigError(
                f"invalid batch size range: {self.batch_size_min}-{self.batch_size_max}"
            )
        if self.duration_sec is not None and self.duration_sec < 0:
            raise ConfigError("duration_sec must be >= 0")
        if self.sink_timeout_sec <= 0 or self.send_timeout_sec <= 0:
            raise ConfigError("timeouts must be > 0")
        if self.log_interval_sec <= 0:
            raise ConfigError("log_interval_sec must be > 0")
        if self.subscriber_queue_size < 1:
            raise ConfigError("subscriber_queue_size must be >= 1")
        if self.overflow_policy not in OVERFLOW_POLICIES:
            raise ConfigError(f"overflow_policy must be one of {OVERFLOW_POLICIES}")
        return self


def _profile_values(profile: Mapping[str, Any]) -> Dict[str, Any]:
    """프로파일 dict에서 Settings 필드만 골라낸다. batch_size_range: [min, max] 지원."""
    known = {f.name for f in fields(Settings)}
    values = {k: v for k, v in profile.items() if k in known}
    rng = profile.get("batch_size_range")
    if rng:
        values["batch_size_min"] = int(rng[0])
        values["batch_size_max"] = int(rng[1]) if len(rng) > 1 else int(rng[0])
    return values


def _env_values(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for var, (name, cast) in ENV_VARS.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            values[name] = cast(raw)
        except ValueError as e:
            raise ConfigError(f"invalid value for {var}: {raw!r}") from e
    return values


def load_settings(
    profile: str | Path | None = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    프로파일 → 환경변수 → CLI 오버라이드 순서로 덮어써 Settings를 만든다.
    검증은 하지 않는다. 호출 측에서 validate() 할 것.

    Args:
        profile: 프로파일 이름 또는 YAML 경로. None이면 baseline
        overrides: CLI에서 받은 값(None 값은 무시)
        environ: 테스트/주입용 환경변수 맵. None이면 os.environ
    """
    path = resolve_profile_path(profile)
    if not path.exists():
        raise ConfigError(f"profile not found: {path}")

    merged: Dict[str, Any] = {}
    merged.update(_profile_values(load_profile(path)))
    merged.update(_env_values(os.environ if environ is None else environ))
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    # duration 0 은 자동 종료 없음
    if merged.get("duration_sec") == 0:
        merged["duration_sec"] = None

    try:
        return replace(Settings(), **merged)
    except TypeError as e:
        raise ConfigError(str(e)) from e
