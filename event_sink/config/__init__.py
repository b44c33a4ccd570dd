# -----------------------------------------------------------------------------
# 패키지 : event_sink/config
# 목적   : 환경 변수/자격 증명/토픽 식별자 로딩
# -----------------------------------------------------------------------------

from .credentials import Credentials, load_credentials, parse_credentials
from .settings import (
    ProducerSettings,
    SinkSettings,
    get_sink_settings,
    load_producer_settings,
    load_sink_settings,
)
from .topic import decode_topic_id, encode_topic_id

__all__ = [
    "Credentials",
    "ProducerSettings",
    "SinkSettings",
    "decode_topic_id",
    "encode_topic_id",
    "get_sink_settings",
    "load_credentials",
    "load_producer_settings",
    "load_sink_settings",
    "parse_credentials",
]
