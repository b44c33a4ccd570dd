# -----------------------------------------------------------------------------
# 파일명 : event_sink/config/settings.py
# 목적   : 환경 변수 기반 sink/producer 설정 로더(env → dataclass)
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .env import get_env_bool, get_env_float, get_env_int, get_env_str, require_env_str
from .topic import decode_topic_id


@dataclass(frozen=True)
class ProducerSettings:
    """프로듀서 튜닝 값을 담는다."""
    linger_ms: int
    acks: str
    compression_type: Optional[str]
    enable_idempotence: bool
    queue_buffering_max_messages: int
    queue_buffering_max_kbytes: int
    message_timeout_ms: int

    def to_kafka_config(self) -> Dict[str, Any]:
        """Kafka 설정 딕셔너리를 만든다(접속 정보 제외)."""
        config: Dict[str, Any] = {
            "linger.ms": self.linger_ms,
            "acks": self.acks,
            "enable.idempotence": self.enable_idempotence,
            "queue.buffering.max.messages": self.queue_buffering_max_messages,
            "queue.buffering.max.kbytes": self.queue_buffering_max_kbytes,
            "message.timeout.ms": self.message_timeout_ms,
        }
        if self.compression_type:
            config["compression.type"] = self.compression_type
        return config


@dataclass(frozen=True)
class SinkSettings:
    """토픽 프로비저닝과 배치 export 설정을 담는다."""
    topic_id: str
    topic_name: str
    topic_partitions: int
    topic_replication: int
    admin_timeout_sec: float
    batch_size: int
    close_timeout_sec: float
    log_level: str
    producer: ProducerSettings


_DEFAULT_LINGER_MS = 5
_DEFAULT_QUEUE_MAX_MESSAGES = 100000
_DEFAULT_QUEUE_MAX_KBYTES = 128 * 1024
_DEFAULT_MESSAGE_TIMEOUT_MS = 30000
_DEFAULT_BATCH_SIZE = 500


def load_producer_settings(env: Mapping[str, str] | None = None) -> ProducerSettings:
    """환경 변수에서 프로듀서 설정을 로드한다."""
    source = os.environ if env is None else env
    return ProducerSettings(
        linger_ms=get_env_int(source, "PRODUCER_LINGER_MS", _DEFAULT_LINGER_MS, minimum=0),
        acks=get_env_str(source, "PRODUCER_ACKS", "all"),
        compression_type=get_env_str(source, "PRODUCER_COMPRESSION"),
        enable_idempotence=get_env_bool(source, "PRODUCER_ENABLE_IDEMPOTENCE", True),
        queue_buffering_max_messages=get_env_int(
            source,
            "PRODUCER_QUEUE_MAX_MESSAGES",
            _DEFAULT_QUEUE_MAX_MESSAGES,
            minimum=1,
        ),
        queue_buffering_max_kbytes=get_env_int(
            source,
            "PRODUCER_QUEUE_MAX_KBYTES",
            _DEFAULT_QUEUE_MAX_KBYTES,
            minimum=1,
        ),
        message_timeout_ms=get_env_int(
            source,
            "PRODUCER_MESSAGE_TIMEOUT_MS",
            _DEFAULT_MESSAGE_TIMEOUT_MS,
            minimum=0,
        ),
    )


def load_sink_settings(env: Mapping[str, str] | None = None) -> SinkSettings:
    """환경 변수에서 sink 설정을 로드한다. EXPORT_TOPIC_ID는 필수."""
    source = os.environ if env is None else env
    topic_id = require_env_str(source, "EXPORT_TOPIC_ID")
    return SinkSettings(
        topic_id=topic_id,
        topic_name=decode_topic_id(topic_id),
        topic_partitions=get_env_int(source, "EXPORT_TOPIC_PARTITIONS", 1, minimum=1),
        topic_replication=get_env_int(source, "EXPORT_TOPIC_REPLICATION", 1, minimum=1),
        admin_timeout_sec=get_env_float(source, "EXPORT_ADMIN_TIMEOUT_SEC", 30.0),
        batch_size=get_env_int(source, "EXPORT_BATCH_SIZE", _DEFAULT_BATCH_SIZE, minimum=1),
        close_timeout_sec=get_env_float(source, "EXPORT_CLOSE_TIMEOUT_SEC", 5.0),
        log_level=get_env_str(source, "EXPORT_LOG_LEVEL", "INFO").upper(),
        producer=load_producer_settings(source),
    )


_settings_cache: SinkSettings | None = None


def get_sink_settings() -> SinkSettings:
    """캐시된 sink 설정을 반환한다."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = load_sink_settings()
    return _settings_cache
