from __future__ import annotations

import asyncio
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional

import pytest
from confluent_kafka import KafkaError, KafkaException

from event_sink.config.credentials import Credentials
from event_sink.config.topic import encode_topic_id


def kafka_exception(code: int, reason: str | None = None) -> KafkaException:
    """브로커 에러 코드를 담은 KafkaException을 만든다."""
    return KafkaException(KafkaError(code, reason))


def _resolved(result: Any = None, error: Optional[BaseException] = None) -> Future:
    future: Future = Future()
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)
    return future


class FakeCluster:
    """여러 AdminClient가 공유하는 토픽 상태."""

    def __init__(self, topics: tuple[str, ...] = ()) -> None:
        self.topics = set(topics)
        self.create_calls = 0
        self.lock = threading.Lock()


class FakeAdminClient:
    def __init__(
        self,
        cluster: FakeCluster,
        *,
        describe_error: Optional[int] = None,
        create_error: Optional[int] = None,
        after_describe: Optional[Callable[[], None]] = None,
    ) -> None:
        self.cluster = cluster
        self.describe_error = describe_error
        self.create_error = create_error
        self.after_describe = after_describe
        self.config: Dict[str, Any] = {}
        self.created: List[Any] = []

    def __call__(self, config: Dict[str, Any]) -> "FakeAdminClient":
        self.config = config
        return self

    def describe_topics(self, collection, request_timeout=None):
        (topic,) = collection.topic_names
        with self.cluster.lock:
            exists = topic in self.cluster.topics
        if self.after_describe is not None:
            self.after_describe()
        if self.describe_error is not None:
            return {topic: _resolved(error=kafka_exception(self.describe_error))}
        if not exists:
            return {topic: _resolved(error=kafka_exception(KafkaError.UNKNOWN_TOPIC_OR_PART))}
        return {topic: _resolved(result=object())}

    def create_topics(self, new_topics, request_timeout=None):
        (new_topic,) = new_topics
        self.created.append(new_topic)
        topic = new_topic.topic
        if self.create_error is not None:
            return {topic: _resolved(error=kafka_exception(self.create_error))}
        with self.cluster.lock:
            self.cluster.create_calls += 1
            if topic in self.cluster.topics:
                error = kafka_exception(KafkaError.TOPIC_ALREADY_EXISTS)
                return {topic: _resolved(error=error)}
            self.cluster.topics.add(topic)
        return {topic: _resolved()}


class FakeTopicHandle:
    """publish 결과를 제어할 수 있는 토픽 핸들."""

    def __init__(
        self,
        topic: str = "events.export",
        *,
        fail_on: tuple[int, ...] = (),
        delay: float = 0.0,
    ) -> None:
        self.topic = topic
        self.fail_on = set(fail_on)
        self.delay = delay
        self.published: List[bytes] = []
        self.keys: List[Optional[bytes]] = []
        self.settled = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.config: Dict[str, Any] = {}
        self.closed_with: Optional[float] = None
        self._calls = 0

    async def publish(self, data: bytes, key: Optional[bytes] = None) -> str:
        index = self._calls
        self._calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if index in self.fail_on:
                raise kafka_exception(KafkaError._MSG_TIMED_OUT, "delivery timed out")
            self.published.append(data)
            self.keys.append(key)
            return f"{self.topic}:0:{index}"
        finally:
            self.in_flight -= 1
            self.settled += 1

    def close(self, timeout: float = 5.0) -> int:
        self.closed_with = timeout
        return 0


class FakeMessage:
    def __init__(self, topic: str, value: bytes, key: Optional[bytes], offset: int) -> None:
        self._topic = topic
        self._value = value
        self._key = key
        self._offset = offset

    def topic(self) -> str:
        return self._topic

    def partition(self) -> int:
        return 0

    def offset(self) -> int:
        return self._offset

    def key(self) -> Optional[bytes]:
        return self._key

    def value(self) -> bytes:
        return self._value


class FakeProducer:
    """produce()는 콜백을 쌓아두고 poll()/flush()에서 처리한다."""

    def __init__(
        self,
        config: Dict[str, Any],
        *,
        fail_values: tuple[bytes, ...] = (),
        buffer_errors: int = 0,
    ) -> None:
        self.config = config
        self.fail_values = set(fail_values)
        self.buffer_errors = buffer_errors
        self.flushed = False
        self._pending: List[tuple] = []
        self._offset = 0
        self._lock = threading.Lock()

    def produce(self, topic, value=None, key=None, callback=None):
        with self._lock:
            if self.buffer_errors > 0:
                self.buffer_errors -= 1
                raise BufferError("Local: Queue full")
            msg = FakeMessage(topic, value, key, self._offset)
            self._offset += 1
            err = KafkaError(KafkaError._MSG_TIMED_OUT) if value in self.fail_values else None
            self._pending.append((callback, err, msg))

    def poll(self, timeout=None):
        with self._lock:
            pending, self._pending = self._pending, []
        for callback, err, msg in pending:
            callback(err, msg)
        if not pending and timeout:
            time.sleep(min(timeout, 0.01))
        return len(pending)

    def flush(self, timeout=None):
        self.poll(0)
        self.flushed = True
        return 0


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(project_id="acme-analytics", bootstrap_servers="broker:9092")


@pytest.fixture
def topic_name() -> str:
    return "events.export"


@pytest.fixture
def topic_id(topic_name: str) -> str:
    return encode_topic_id(topic_name)


@pytest.fixture
def base_env(topic_id: str) -> Dict[str, str]:
    return {
        "EXPORT_TOPIC_ID": topic_id,
        "EXPORT_CREDENTIALS_JSON": (
            '{"project_id": "acme-analytics", "bootstrap_servers": "broker:9092"}'
        ),
    }
