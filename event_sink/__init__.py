# -----------------------------------------------------------------------------
# 패키지 : event_sink
# 목적   : 수집 이벤트 배치를 표준 메시지로 바꿔 Kafka 토픽에 발행하는 sink
# -----------------------------------------------------------------------------

from .errors import (
    ConfigurationError,
    ExportSinkError,
    InvalidEventError,
    ProvisioningError,
    RetryableExportError,
)
from .exporter.batch_exporter import export_batch
from .models.events import CanonicalMessage, RawEvent
from .producer.provisioner import provision_topic
from .sink import EventExportSink
from .transform.event_transformer import transform_event

__all__ = [
    "CanonicalMessage",
    "ConfigurationError",
    "EventExportSink",
    "ExportSinkError",
    "InvalidEventError",
    "ProvisioningError",
    "RawEvent",
    "RetryableExportError",
    "export_batch",
    "provision_topic",
    "transform_event",
]
