# -----------------------------------------------------------------------------
# 파일명 : event_sink/transform/event_transformer.py
# 목적   : RawEvent → CanonicalMessage 변환과 직렬화
# 설명   : 부작용 없는 순수 함수. 배치 단위 변환은 transform_batch로 묶는다
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Union

import orjson

from ..errors import InvalidEventError
from ..models.events import CanonicalMessage, RawEvent

AUTOCAPTURE_EVENT = "$autocapture"
ELEMENTS_KEY = "$elements"

EventInput = Union[RawEvent, Mapping[str, Any]]


def _first_present(*values: Any) -> Any:
    """처음으로 비어 있지 않은 값을 반환한다."""
    for value in values:
        if value:
            return value
    return None


def transform_event(raw: RawEvent) -> CanonicalMessage:
    """수집 이벤트를 토픽에 쓸 표준 메시지로 변환한다."""
    if not raw.uuid:
        raise InvalidEventError("event is missing uuid")

    properties = raw.properties
    props = properties or {}

    ip = props.get("$ip") or raw.ip
    timestamp = _first_present(raw.timestamp, props.get("timestamp"), raw.now, raw.sent_at)

    ingested_properties = properties
    elements: List[Any] = []

    # $autocapture일 때만 $elements를 elements로 옮긴다.
    if raw.event == AUTOCAPTURE_EVENT and props.get(ELEMENTS_KEY):
        ingested_properties = {k: v for k, v in props.items() if k != ELEMENTS_KEY}
        elements = props[ELEMENTS_KEY]

    return CanonicalMessage(
        event=raw.event,
        distinct_id=raw.distinct_id,
        team_id=raw.team_id,
        ip=ip,
        site_url=raw.site_url,
        timestamp=timestamp,
        uuid=raw.uuid,
        properties=dict(ingested_properties or {}),
        elements=elements,
        people_set=dict(raw.set or {}),
        people_set_once=dict(raw.set_once or {}),
    )


def serialize_message(message: CanonicalMessage) -> bytes:
    """메시지를 전송용 JSON 바이트로 만든다."""
    return message.to_bytes()


def coerce_event(item: EventInput, index: int | None = None) -> RawEvent:
    """dict 레코드도 받을 수 있도록 RawEvent로 맞춘다."""
    if isinstance(item, RawEvent):
        return item
    if isinstance(item, Mapping):
        return RawEvent.from_dict(item)
    raise InvalidEventError(
        f"unsupported event record type {type(item).__name__}",
        index=index,
    )


def transform_batch(events: Iterable[EventInput]) -> List[CanonicalMessage]:
    """배치 전체를 변환한다. 하나라도 전제 조건을 어기면 배치를 거부한다."""
    messages: List[CanonicalMessage] = []
    for idx, item in enumerate(events):
        raw = coerce_event(item, idx)
        try:
            messages.append(transform_event(raw))
        except InvalidEventError as exc:
            raise InvalidEventError(str(exc), index=idx) from exc
    return messages


def serialize_batch(messages: Iterable[CanonicalMessage]) -> List[bytes]:
    """메시지를 직렬화한다. JSON으로 못 바꾸는 값은 InvalidEventError로 올린다."""
    payloads: List[bytes] = []
    for idx, message in enumerate(messages):
        try:
            payloads.append(serialize_message(message))
        except orjson.JSONEncodeError as exc:
            raise InvalidEventError(f"event is not JSON serializable: {exc}", index=idx) from exc
    return payloads
