# -----------------------------------------------------------------------------
# 패키지 : event_sink/producer
# 목적   : Kafka 토픽 프로비저닝과 publish 핸들
# -----------------------------------------------------------------------------

from .kafka_client import KafkaTopicHandle, TopicHandle
from .provisioner import ensure_topic, kafka_error_code, provision_topic

__all__ = [
    "KafkaTopicHandle",
    "TopicHandle",
    "ensure_topic",
    "kafka_error_code",
    "provision_topic",
]
