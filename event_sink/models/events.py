# -----------------------------------------------------------------------------
# 파일명 : event_sink/models/events.py
# 목적   : 수집 측 RawEvent와 토픽에 쓰는 CanonicalMessage 모델 정의
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import orjson

# 와이어 포맷의 키 순서(직렬화는 정렬 키를 쓰지만 to_dict는 이 순서를 따른다)
MESSAGE_FIELDS = (
    "event",
    "distinct_id",
    "team_id",
    "ip",
    "site_url",
    "timestamp",
    "uuid",
    "properties",
    "elements",
    "people_set",
    "people_set_once",
)


def _mapping_or_none(value: Any) -> Optional[Dict[str, Any]]:
    """매핑이면 얕은 복사본을, 아니면 None을 반환한다."""
    if isinstance(value, Mapping):
        return dict(value)
    return None


@dataclass(frozen=True)
class RawEvent:
    """
    수집 파이프라인이 넘겨주는 이벤트.

    now/sent_at은 배치 수준 타임스탬프로 timestamp 폴백에 쓰인다.
    인식하지 않는 필드는 from_dict에서 버린다.
    """
    event: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None
    set: Optional[Dict[str, Any]] = None
    set_once: Optional[Dict[str, Any]] = None
    distinct_id: Optional[str] = None
    team_id: Optional[int] = None
    ip: Optional[str] = None
    site_url: Optional[str] = None
    timestamp: Optional[str] = None
    uuid: Optional[str] = None
    now: Optional[str] = None
    sent_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawEvent":
        """수집 레코드(dict)에서 RawEvent를 만든다."""
        return cls(
            event=data.get("event"),
            properties=_mapping_or_none(data.get("properties")),
            set=_mapping_or_none(data.get("$set")),
            set_once=_mapping_or_none(data.get("$set_once")),
            distinct_id=data.get("distinct_id"),
            team_id=data.get("team_id"),
            ip=data.get("ip"),
            site_url=data.get("site_url"),
            timestamp=data.get("timestamp"),
            uuid=data.get("uuid"),
            now=data.get("now"),
            sent_at=data.get("sent_at"),
        )


@dataclass(frozen=True)
class CanonicalMessage:
    event: Optional[str]
    distinct_id: Optional[str]
    team_id: Optional[int]
    ip: Optional[str]
    site_url: Optional[str]
    timestamp: Optional[str]
    uuid: str
    properties: Dict[str, Any] = field(default_factory=dict)
    elements: List[Any] = field(default_factory=list)
    people_set: Dict[str, Any] = field(default_factory=dict)
    people_set_once: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """와이어 포맷 딕셔너리. 기본값 필드도 생략하지 않는다."""
        return {name: getattr(self, name) for name in MESSAGE_FIELDS}

    def to_bytes(self) -> bytes:
        """정렬된 키의 JSON 바이트로 직렬화한다."""
        return orjson.dumps(self.to_dict(), option=orjson.OPT_SORT_KEYS)
