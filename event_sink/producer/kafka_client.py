# -----------------------------------------------------------------------------
# 파일명 : event_sink/producer/kafka_client.py
# 목적   : confluent-kafka Producer 래퍼(토픽 하나에 묶인 publish 핸들)
# 설명   : produce()는 비동기 enqueue이고, 전송 결과는 백그라운드 poll 스레드의
#          delivery callback에서 asyncio future로 넘긴다
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Dict, Optional, Protocol

from confluent_kafka import KafkaException, Producer

from ..logger import get_logger

logger = get_logger("event_sink.producer")


class TopicHandle(Protocol):
    """export 코어가 의존하는 최소 인터페이스."""

    topic: str

    async def publish(self, data: bytes, key: Optional[bytes] = None) -> str:
        ...


def _settle_result(future: "asyncio.Future[str]", message_id: str) -> None:
    if not future.done():
        future.set_result(message_id)


def _settle_error(future: "asyncio.Future[str]", error: BaseException) -> None:
    if not future.done():
        future.set_exception(error)


class KafkaTopicHandle:
    """
    하나의 토픽에 묶인 publish 핸들.

    프로세스 수명 동안 공유되며 publish()는 여러 코루틴에서 동시에 호출해도 된다.
    """

    def __init__(
        self,
        topic: str,
        config: Dict[str, Any],
        *,
        producer_factory: Callable[[Dict[str, Any]], Producer] = Producer,
        poll_interval_sec: float = 0.1,
        backoff_sec: float = 0.001,
    ) -> None:
        self.topic = topic
        self._producer = producer_factory(config)
        self._poll_interval_sec = max(poll_interval_sec, 0.0)
        self._backoff_sec = max(backoff_sec, 0.0)
        self._closed = threading.Event()
        self._poll_thread = threading.Thread(
            target=self._poll_loop,
            name=f"kafka-poll-{topic}",
            daemon=True,
        )
        self._poll_thread.start()

    def _poll_loop(self) -> None:
        """delivery callback을 처리하기 위해 주기적으로 poll한다."""
        while not self._closed.is_set():
            try:
                self._producer.poll(self._poll_interval_sec)
            except Exception:
                logger.exception("producer poll failed topic=%s", self.topic)

    async def publish(self, data: bytes, key: Optional[bytes] = None) -> str:
        """
        메시지 하나를 발행하고 전달 확인 ID("topic:partition:offset")를 반환한다.

        로컬 큐가 가득 차면(BufferError) poll+backoff로 흡수하고,
        그 외 produce 예외와 전송 실패는 호출부로 올린다.
        """
        if self._closed.is_set():
            raise RuntimeError(f"topic handle for {self.topic} is closed")

        loop = asyncio.get_running_loop()
        future: "asyncio.Future[str]" = loop.create_future()

        def _delivery_report(err, msg):
            """전송 결과를 이벤트 루프의 future로 넘긴다."""
            if loop.is_closed():
                return
            if err is not None:
                logger.warning(
                    "Kafka 전송 실패: topic=%s key=%s error=%s",
                    msg.topic() if msg is not None else self.topic,
                    msg.key() if msg is not None else key,
                    err,
                )
                loop.call_soon_threadsafe(_settle_error, future, KafkaException(err))
                return
            message_id = f"{msg.topic()}:{msg.partition()}:{msg.offset()}"
            loop.call_soon_threadsafe(_settle_result, future, message_id)

        while True:
            try:
                self._producer.produce(
                    topic=self.topic,
                    value=data,
                    key=key,
                    callback=_delivery_report,
                )
                break
            except BufferError:
                self._producer.poll(0)
                if self._backoff_sec > 0:
                    await asyncio.sleep(self._backoff_sec)

        return await future

    def close(self, timeout: float = 5.0) -> int:
        """poll 스레드를 멈추고 남은 메시지를 flush한다. 미전송 건수를 반환."""
        if self._closed.is_set():
            return 0
        self._closed.set()
        self._poll_thread.join(timeout=max(self._poll_interval_sec * 2, 1.0))
        remaining = 0
        try:
            remaining = self._producer.flush(timeout)
        except Exception:
            logger.exception("producer flush failed topic=%s", self.topic)
            raise
        if remaining:
            logger.warning(
                "producer closed with %d undelivered message(s) topic=%s",
                remaining,
                self.topic,
            )
        return remaining
