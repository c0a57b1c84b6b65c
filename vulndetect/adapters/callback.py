"""이 파일은 .py 콜백 서버 어댑터로 콜백 URL 생성과 상호작용 기록 조회를 제공합니다."""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
import logging
import os
from typing import Optional

from vulndetect.core import config
from vulndetect.core.errors import AdapterError

from .http import HttpClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallbackServerConfig:
    # address가 비어 있으면 콜백 서버를 쓰지 않는 세션이다.
    address: str = ""
    port: int = 8881
    # 조회용 URI가 따로 없으면 http://address:port 를 사용한다.
    polling_uri: str = ""
    # domain이 있으면 DNS 기반 콜백 주소(<cbid>.<domain>)를 만든다.
    domain: str = ""

    @classmethod
    def from_env(cls) -> "CallbackServerConfig":
        # 호출 시점의 환경 변수를 읽고, 없으면 config 모듈의 기본값을 쓴다.
        return cls(
            address=os.getenv("VULNDETECT_CALLBACK_ADDRESS", config.CALLBACK_ADDRESS),
            port=int(os.getenv("VULNDETECT_CALLBACK_PORT", str(config.CALLBACK_PORT))),
            polling_uri=os.getenv("VULNDETECT_CALLBACK_POLLING_URI", config.CALLBACK_POLLING_URI),
            domain=os.getenv("VULNDETECT_CALLBACK_DOMAIN", config.CALLBACK_DOMAIN),
        )

    @property
    def is_enabled(self) -> bool:
        return bool(self.address or self.domain)


def callback_id(secret: str) -> str:
    # 외부에 노출되는 ID는 비밀값의 해시로 만들어 비밀값 자체를 숨긴다.
    return hashlib.sha3_224(secret.encode("utf-8")).hexdigest()


class CallbackClient:
    def __init__(
        self,
        server: CallbackServerConfig,
        http_client: Optional[HttpClient] = None,
    ) -> None:
        if not server.is_enabled:
            raise AdapterError("Callback server address or domain is required")
        self.server = server
        self.http_client = http_client or HttpClient(timeout=config.HTTP_TIMEOUT_SECONDS)

    @property
    def polling_uri(self) -> str:
        if self.server.polling_uri:
            return self.server.polling_uri
        return f"http://{self.server.address}:{self.server.port}/"

    def get_callback_uri(self, secret: str) -> str:
        cbid = callback_id(secret)
        if self.server.domain:
            return f"{cbid}.{self.server.domain}"
        return f"http://{self.server.address}:{self.server.port}/{cbid}"

    def has_interaction(self, secret: str, since: Optional[float] = None) -> bool:
        """비밀값에 해당하는 DNS/HTTP 상호작용이 기록되었는지 조회한다.

        콜백 서버가 기록이 없다고 답하면 False, 응답 자체가 비정상이면 AdapterError를 던진다.
        """
        params = {"secret": secret}
        if since is not None:
            params["since"] = f"{since:.3f}"
        result = self.http_client.get(self.polling_uri, params=params)
        if result.status == 404:
            return False
        if result.status != 200:
            raise AdapterError(f"Callback server returned status {result.status}")
        data = result.json()
        if not isinstance(data, dict):
            raise AdapterError("Callback server response must be an object")
        hit = bool(data.get("has_dns_interaction")) or bool(data.get("has_http_interaction"))
        logger.debug("Callback lookup for %s: %s", callback_id(secret)[:12], hit)
        return hit


def create_callback_client(
    server: Optional[CallbackServerConfig] = None,
    http_client: Optional[HttpClient] = None,
) -> Optional[CallbackClient]:
    # 콜백 서버가 설정되지 않은 세션이면 None을 돌려주어 콜백 없는 페이로드로 진행한다.
    server = server or CallbackServerConfig.from_env()
    if not server.is_enabled:
        logger.info("Callback server not configured; callback payloads are disabled")
        return None
    return CallbackClient(server, http_client)
