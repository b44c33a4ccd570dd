# -----------------------------------------------------------------------------
# 파일명 : event_sink/config/credentials.py
# 목적   : 외부에서 주입된 JSON 자격 증명을 파싱하고 Kafka 설정으로 변환
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import orjson

from ..errors import ConfigurationError
from .env import get_env_str


@dataclass(frozen=True)
class Credentials:
    """프로젝트 식별자와 브로커 접속 정보를 담는다."""
    project_id: str
    bootstrap_servers: str
    security_protocol: Optional[str] = None
    sasl_mechanism: Optional[str] = None
    sasl_username: Optional[str] = None
    sasl_password: Optional[str] = field(default=None, repr=False)
    extra: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Credentials":
        """JSON 객체에서 자격 증명을 만든다. project_id는 필수."""
        if not isinstance(data, Mapping):
            raise ConfigurationError("credentials JSON must be an object")

        project_id = str(data.get("project_id") or "").strip()
        if not project_id:
            raise ConfigurationError("credentials are missing project_id")

        bootstrap = str(data.get("bootstrap_servers") or "").strip()
        if not bootstrap:
            raise ConfigurationError("credentials are missing bootstrap_servers")

        extra = data.get("extra") or {}
        if not isinstance(extra, Mapping):
            raise ConfigurationError("credentials 'extra' must be an object")

        return cls(
            project_id=project_id,
            bootstrap_servers=bootstrap,
            security_protocol=data.get("security_protocol"),
            sasl_mechanism=data.get("sasl_mechanism"),
            sasl_username=data.get("sasl_username"),
            sasl_password=data.get("sasl_password"),
            extra=dict(extra),
        )

    def to_kafka_config(self) -> Dict[str, Any]:
        """librdkafka 설정 딕셔너리를 만든다. client.id는 프로젝트에 묶는다."""
        config: Dict[str, Any] = {
            "bootstrap.servers": self.bootstrap_servers,
            "client.id": f"{self.project_id}-event-sink",
        }
        if self.security_protocol:
            config["security.protocol"] = self.security_protocol
        if self.sasl_mechanism:
            config["sasl.mechanism"] = self.sasl_mechanism
        if self.sasl_username:
            config["sasl.username"] = self.sasl_username
        if self.sasl_password:
            config["sasl.password"] = self.sasl_password
        config.update(self.extra)
        return config


def parse_credentials(blob: bytes | str | None) -> Credentials:
    """JSON blob을 Credentials로 파싱한다."""
    if not blob or not blob.strip():
        raise ConfigurationError("JSON config not provided!")
    try:
        data = orjson.loads(blob)
    except orjson.JSONDecodeError as exc:
        raise ConfigurationError(f"credentials are not valid JSON: {exc}") from exc
    return Credentials.from_mapping(data)


def load_credentials(env: Mapping[str, str]) -> Credentials:
    """
    EXPORT_CREDENTIALS_JSON(인라인) 또는 EXPORT_CREDENTIALS_FILE(첨부 파일)에서 읽는다.

    둘 다 있으면 인라인 값이 우선한다.
    """
    inline = get_env_str(env, "EXPORT_CREDENTIALS_JSON")
    if inline is not None:
        return parse_credentials(inline)

    path = get_env_str(env, "EXPORT_CREDENTIALS_FILE")
    if path is None:
        raise ConfigurationError("JSON config not provided!")
    try:
        blob = Path(path).read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"cannot read credentials file {path}: {exc}") from exc
    return parse_credentials(blob)


__all__ = ["Credentials", "load_credentials", "parse_credentials"]
