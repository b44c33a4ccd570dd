# -----------------------------------------------------------------------------
# 파일명 : event_sink/producer/provisioner.py
# 목적   : 시작 시 대상 토픽이 있는지 확인하고 없으면 생성(동시 생성 경합 허용)
# 설명   : 에러 분류는 KafkaError 코드로만 한다
#          조회 NOT_FOUND → 생성 / 생성 ALREADY_EXISTS → 성공 / 그 외 → 중단
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from confluent_kafka import KafkaError, KafkaException, TopicCollection
from confluent_kafka.admin import AdminClient, NewTopic

from ..config.credentials import Credentials
from ..config.settings import ProducerSettings, load_producer_settings
from ..config.topic import decode_topic_id
from ..errors import ConfigurationError, ProvisioningError
from ..logger import get_logger
from .kafka_client import KafkaTopicHandle, TopicHandle

logger = get_logger("event_sink.provisioner")

TOPIC_NOT_FOUND_CODES = frozenset(
    {
        KafkaError.UNKNOWN_TOPIC_OR_PART,
        KafkaError._UNKNOWN_TOPIC,
    }
)
TOPIC_EXISTS_CODES = frozenset({KafkaError.TOPIC_ALREADY_EXISTS})


def kafka_error_code(exc: BaseException) -> Optional[int]:
    """KafkaException에서 KafkaError 코드를 꺼낸다. 없으면 None."""
    if isinstance(exc, KafkaException) and exc.args:
        err = exc.args[0]
        if isinstance(err, KafkaError):
            return err.code()
    return None


def _describe_topic(admin: AdminClient, topic: str, timeout: float) -> None:
    """메타데이터 조회로 토픽 존재를 확인한다. 없으면 KafkaException이 올라온다."""
    futures = admin.describe_topics(TopicCollection([topic]), request_timeout=timeout)
    futures[topic].result()


def _create_topic(
    admin: AdminClient,
    topic: str,
    *,
    partitions: int,
    replication: int,
    timeout: float,
) -> None:
    """토픽 생성 요청을 보내고 결과를 기다린다."""
    new_topic = NewTopic(
        topic,
        num_partitions=partitions,
        replication_factor=replication,
    )
    futures = admin.create_topics([new_topic], request_timeout=timeout)
    futures[topic].result()


def ensure_topic(
    admin: AdminClient,
    topic: str,
    *,
    partitions: int = 1,
    replication: int = 1,
    timeout: float = 30.0,
) -> bool:
    """
    토픽이 존재하도록 보장한다. 이번 호출이 생성했으면 True.

    Raises:
        ProvisioningError: 토픽 조회가 NOT_FOUND 외의 이유로 실패했거나,
            생성이 ALREADY_EXISTS 외의 이유로 실패한 경우.
    """
    try:
        _describe_topic(admin, topic, timeout)
        return False
    except KafkaException as exc:
        code = kafka_error_code(exc)
        # 권한/전송 오류를 생성 시도로 바꾸지 않는다.
        if code not in TOPIC_NOT_FOUND_CODES:
            raise ProvisioningError(
                f"Topic lookup failed for {topic}: {exc}",
                topic=topic,
                code=code,
            ) from exc

    logger.info("Creating Kafka topic - %s", topic)
    try:
        _create_topic(
            admin,
            topic,
            partitions=partitions,
            replication=replication,
            timeout=timeout,
        )
    except KafkaException as exc:
        code = kafka_error_code(exc)
        if code in TOPIC_EXISTS_CODES:
            # 다른 워커가 먼저 만들었다.
            logger.info("Kafka topic already created by another worker - %s", topic)
            return False
        raise ProvisioningError(
            f"Topic creation failed for {topic}: {exc}",
            topic=topic,
            code=code,
        ) from exc
    return True


def _build_client(kind: str, factory: Callable[[Dict[str, Any]], Any], config: Dict[str, Any]) -> Any:
    """클라이언트 생성 시 librdkafka 설정 오류를 ConfigurationError로 바꾼다."""
    try:
        return factory(config)
    except KafkaException as exc:
        raise ConfigurationError(
            f"invalid Kafka {kind} configuration (code={kafka_error_code(exc)}): {exc}"
        ) from exc


def _discard_handle(handle: TopicHandle) -> None:
    """프로비저닝이 실패하면 미리 만든 핸들을 정리한다."""
    close = getattr(handle, "close", None)
    if close is None:
        return
    try:
        close(0)
    except Exception:
        logger.exception("failed to close topic handle after provisioning error")


def provision_topic(
    credentials: Optional[Credentials],
    topic_id: Optional[str],
    *,
    producer_settings: Optional[ProducerSettings] = None,
    partitions: int = 1,
    replication: int = 1,
    timeout: float = 30.0,
    admin_factory: Callable[[Dict[str, Any]], AdminClient] = AdminClient,
    handle_factory: Callable[[str, Dict[str, Any]], TopicHandle] = KafkaTopicHandle,
) -> TopicHandle:
    """
    자격 증명과 base64 토픽 식별자로 토픽을 준비하고 publish 핸들을 만든다.

    프로세스당 한 번, export 호출을 받기 전에 호출한다. 재시도 루프는 없다.
    """
    if credentials is None:
        raise ConfigurationError("JSON config not provided!")
    if not credentials.project_id:
        raise ConfigurationError("credentials are missing project_id")
    topic = decode_topic_id(topic_id)

    connection = credentials.to_kafka_config()
    settings = producer_settings or load_producer_settings()

    # 설정 오류는 토픽을 만들기 전에 드러나도록 두 클라이언트를 먼저 만든다.
    admin = _build_client("admin", admin_factory, connection)
    handle = _build_client(
        "producer",
        lambda config: handle_factory(topic, config),
        {**connection, **settings.to_kafka_config()},
    )

    try:
        ensure_topic(
            admin,
            topic,
            partitions=partitions,
            replication=replication,
            timeout=timeout,
        )
    except ProvisioningError:
        _discard_handle(handle)
        raise
    return handle
