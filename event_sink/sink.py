# -----------------------------------------------------------------------------
# 파일명 : event_sink/sink.py
# 목적   : 프로비저닝(setup) → 배치 export → close 수명주기를 묶는 얇은 홀더
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
from typing import Any, Callable, Mapping, Optional, Sequence

from .config.credentials import Credentials, load_credentials
from .config.settings import SinkSettings, get_sink_settings, load_sink_settings
from .errors import ConfigurationError
from .exporter.batch_exporter import export_batch
from .logger import get_logger, set_level
from .producer.kafka_client import TopicHandle
from .producer.provisioner import provision_topic
from .transform.event_transformer import EventInput

logger = get_logger("event_sink.sink")


class EventExportSink:
    """토픽 핸들을 명시적으로 들고 있는 export sink."""

    def __init__(
        self,
        settings: SinkSettings,
        credentials: Credentials,
        *,
        provisioner: Callable[..., TopicHandle] = provision_topic,
    ) -> None:
        self._settings = settings
        self._credentials = credentials
        self._provisioner = provisioner
        self._handle: Optional[TopicHandle] = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **kwargs: Any) -> "EventExportSink":
        """환경 변수에서 설정/자격 증명을 읽어 sink를 만든다."""
        source = os.environ if env is None else env
        settings = get_sink_settings() if env is None else load_sink_settings(env)
        set_level(settings.log_level)
        return cls(settings, load_credentials(source), **kwargs)

    @property
    def settings(self) -> SinkSettings:
        return self._settings

    @property
    def topic_handle(self) -> Optional[TopicHandle]:
        return self._handle

    def setup(self) -> TopicHandle:
        """토픽을 준비한다. 인스턴스당 한 번만 실제로 실행된다."""
        if self._handle is not None:
            return self._handle
        self._handle = self._provisioner(
            self._credentials,
            self._settings.topic_id,
            producer_settings=self._settings.producer,
            partitions=self._settings.topic_partitions,
            replication=self._settings.topic_replication,
            timeout=self._settings.admin_timeout_sec,
        )
        logger.info(
            "sink ready project=%s topic=%s",
            self._credentials.project_id,
            self._settings.topic_name,
        )
        return self._handle

    async def export_events(self, events: Sequence[EventInput]) -> None:
        """배치를 export한다. setup() 전에 호출하면 ConfigurationError."""
        if self._handle is None:
            raise ConfigurationError("export attempted before the topic was provisioned")
        await export_batch(events, self._handle, topic_label=self._settings.topic_name)

    def close(self, timeout: Optional[float] = None) -> None:
        """핸들을 flush 후 정리한다."""
        handle, self._handle = self._handle, None
        if handle is None:
            return
        close = getattr(handle, "close", None)
        if close is not None:
            close(self._settings.close_timeout_sec if timeout is None else timeout)
