# -----------------------------------------------------------------------------
# 파일명 : event_sink/exporter/batch_exporter.py
# 목적   : 배치 변환 후 메시지별 publish를 동시에 보내고 실패를 하나로 모은다
# 설명   : 전부 성공해야 성공. 하나라도 실패하면 RetryableExportError로 배치 전체 재시도
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import time
from typing import List, Optional, Sequence

from ..errors import ConfigurationError, RetryableExportError
from ..logger import get_logger
from ..producer.kafka_client import TopicHandle
from ..transform.event_transformer import EventInput, serialize_batch, transform_batch

logger = get_logger("event_sink.exporter")


def _plural(count: int) -> str:
    return "events" if count > 1 else "event"


async def publish_all(
    topic_handle: TopicHandle,
    payloads: Sequence[bytes],
    keys: Sequence[Optional[bytes]],
) -> List[str | BaseException]:
    """메시지마다 publish를 하나씩 띄우고 모두 끝날 때까지 기다린다."""
    return await asyncio.gather(
        *(topic_handle.publish(data, key) for data, key in zip(payloads, keys)),
        return_exceptions=True,
    )


async def export_batch(
    events: Sequence[EventInput],
    topic_handle: Optional[TopicHandle],
    *,
    topic_label: Optional[str] = None,
) -> None:
    """
    이벤트 배치를 표준 메시지로 바꿔 토픽에 발행한다.

    Raises:
        ConfigurationError: 토픽 핸들이 준비되지 않은 상태에서 호출된 경우.
        InvalidEventError: 배치 안에 전제 조건을 어긴 이벤트가 있는 경우.
        RetryableExportError: publish가 하나라도 실패한 경우.
    """
    if topic_handle is None:
        raise ConfigurationError("No Kafka topic handle initialized!")

    topic = topic_label or topic_handle.topic
    count = len(events)
    if count == 0:
        return

    messages = transform_batch(events)
    payloads = serialize_batch(messages)
    keys = [message.uuid.encode("utf-8") for message in messages]

    start = time.perf_counter()
    outcomes = await publish_all(topic_handle, payloads, keys)
    elapsed = time.perf_counter() - start

    failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
    if failures:
        # 취소는 실패로 바꾸지 않고 그대로 올린다.
        for failure in failures:
            if isinstance(failure, asyncio.CancelledError):
                raise failure
        logger.error(
            "Error publishing %d %s to %s: %d of %d publish call(s) failed: %s",
            count,
            _plural(count),
            topic,
            len(failures),
            count,
            failures[0],
        )
        detail = "; ".join(sorted({repr(failure) for failure in failures}))
        raise RetryableExportError(
            f"Error publishing to Kafka! {detail}",
            topic=topic,
            event_count=count,
            errors=failures,
        ) from failures[0]

    logger.info(
        "Published %d %s to %s. Took %.3f seconds.",
        count,
        _plural(count),
        topic,
        elapsed,
    )
