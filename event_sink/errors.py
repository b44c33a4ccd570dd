# -----------------------------------------------------------------------------
# 파일명 : event_sink/errors.py
# 목적   : 프로비저닝과 배치 export의 에러 분류
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Optional, Sequence


class ExportSinkError(Exception):
    """sink가 올리는 모든 예외의 기반 클래스."""


class ConfigurationError(ExportSinkError):
    """설정 누락/오류. 재시도하지 않는다."""


class InvalidEventError(ExportSinkError, ValueError):
    """수집 이벤트가 전제 조건을 어긴 경우(uuid 누락 등). 재시도하지 않는다."""

    def __init__(self, message: str, *, index: Optional[int] = None) -> None:
        self.index = index
        if index is not None:
            message = f"{message} (event index={index})"
        super().__init__(message)


class ProvisioningError(ExportSinkError):
    """토픽 조회/생성 실패. 시작 단계에서 치명적."""

    def __init__(self, message: str, *, topic: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.topic = topic
        self.code = code


class RetryableExportError(ExportSinkError):
    """
    배치 발행 중 하나라도 실패하면 배치 전체를 재시도하라는 신호.

    errors에는 실패한 publish의 원본 예외가 모두 담긴다.
    """

    def __init__(
        self,
        message: str,
        *,
        topic: str,
        event_count: int,
        errors: Sequence[BaseException] = (),
    ) -> None:
        super().__init__(message)
        self.topic = topic
        self.event_count = event_count
        self.errors = list(errors)
