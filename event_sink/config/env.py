# -----------------------------------------------------------------------------
# 파일명 : event_sink/config/env.py
# 목적   : 환경 변수 매핑에서 타입별 값을 읽는 헬퍼
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Mapping, Optional

from ..errors import ConfigurationError


def get_env_str(
    env: Mapping[str, str],
    key: str,
    default: Optional[str] = None,
) -> Optional[str]:
    """공백을 제거한 문자열을 반환하고, 비어 있으면 default를 쓴다."""
    value = env.get(key)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def require_env_str(env: Mapping[str, str], key: str) -> str:
    """필수 환경 변수를 읽는다. 없으면 ConfigurationError."""
    value = get_env_str(env, key)
    if value is None:
        raise ConfigurationError(f"{key} is required")
    return value


def get_env_int(
    env: Mapping[str, str],
    key: str,
    default: int,
    *,
    minimum: Optional[int] = None,
) -> int:
    """정수 환경 변수를 읽는다."""
    value = get_env_str(env, key)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer (got: {value})") from exc
    if minimum is not None and parsed < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum} (got: {parsed})")
    return parsed


def get_env_float(env: Mapping[str, str], key: str, default: float) -> float:
    """실수 환경 변수를 읽는다."""
    value = get_env_str(env, key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a float (got: {value})") from exc


def get_env_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    """불리언 환경 변수를 읽는다."""
    value = get_env_str(env, key)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "y")
