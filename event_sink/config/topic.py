# -----------------------------------------------------------------------------
# 파일명 : event_sink/config/topic.py
# 목적   : 전송용(base64) 토픽 식별자를 실제 토픽명으로 복원
# -----------------------------------------------------------------------------

from __future__ import annotations

import base64
import binascii
from typing import Optional

from ..errors import ConfigurationError


def decode_topic_id(encoded: Optional[str]) -> str:
    """base64로 인코딩된 토픽 식별자를 실제 토픽명으로 복원한다."""
    if encoded is None or not encoded.strip():
        raise ConfigurationError("Topic ID not provided!")

    raw = encoded.strip()
    # 패딩이 빠진 값도 허용한다.
    raw += "=" * (-len(raw) % 4)
    try:
        name = base64.b64decode(raw, validate=True).decode("utf-8").strip()
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Topic ID is not valid base64: {encoded!r}") from exc

    if not name:
        raise ConfigurationError("Topic ID decodes to an empty topic name")
    return name


def encode_topic_id(name: str) -> str:
    """토픽명을 전송용 base64 식별자로 만든다."""
    return base64.b64encode(name.encode("utf-8")).decode("ascii")
