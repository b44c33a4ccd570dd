# -----------------------------------------------------------------------------
# 패키지 : event_sink/transform
# 목적   : 수집 이벤트 → 표준 메시지 변환
# -----------------------------------------------------------------------------

from .event_transformer import (
    AUTOCAPTURE_EVENT,
    coerce_event,
    serialize_batch,
    serialize_message,
    transform_batch,
    transform_event,
)

__all__ = [
    "AUTOCAPTURE_EVENT",
    "coerce_event",
    "serialize_batch",
    "serialize_message",
    "transform_batch",
    "transform_event",
]
