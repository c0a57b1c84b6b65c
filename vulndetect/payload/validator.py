"""이 파일은 .py 페이로드 검증 모듈로 정규식/콜백 방식의 확인 결과를 만듭니다."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
import time
from typing import Callable, Optional

from vulndetect.adapters.callback import CallbackClient
from vulndetect.core import config
from vulndetect.core.errors import AdapterError
from vulndetect.core.types import DetectionStatus

from .catalog import ValidationType
from .generator import Payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    # 확인되지 않음(False)은 오류가 아니라 "판정 불가/미확인" 결과이다.
    confirmed: bool
    validation_type: ValidationType
    detail: str = ""

    @property
    def detection_status(self) -> DetectionStatus:
        # 미확인 판정은 보고서에 VULNERABILITY_UNCONFIRMED로 남긴다.
        if self.confirmed:
            return DetectionStatus.VULNERABILITY_VERIFIED
        return DetectionStatus.VULNERABILITY_UNCONFIRMED


class PayloadValidator:
    """페이로드 정의에 선언된 방식으로 취약점 확인 여부를 판정한다.

    콜백 방식은 이 코어에서 유일하게 대기하는 지점이며, timeout 또는
    cancel_event로 언제든 중단할 수 있다.
    """

    def __init__(
        self,
        callback_client: Optional[CallbackClient] = None,
        poll_interval: float = config.POLL_INTERVAL_SECONDS,
        default_timeout: float = config.CALLBACK_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.callback_client = callback_client
        self.poll_interval = max(poll_interval, config.MIN_POLL_INTERVAL_SECONDS)
        self.default_timeout = default_timeout
        self.clock = clock

    def validate(
        self,
        payload: Payload,
        response_text: Optional[str] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ValidationResult:
        validation_type = payload.validation_type
        if validation_type == ValidationType.VALIDATION_REGEX:
            return self.check_regex(payload, response_text)
        if validation_type == ValidationType.VALIDATION_CALLBACK:
            return self.wait_for_callback(payload, timeout=timeout, cancel_event=cancel_event)
        return ValidationResult(False, validation_type, "payload declares no validation")

    def check_regex(self, payload: Payload, response_text: Optional[str]) -> ValidationResult:
        pattern = payload.validation_pattern
        if pattern is None or response_text is None:
            return ValidationResult(False, ValidationType.VALIDATION_REGEX, "no response to match")
        if pattern.search(response_text):
            return ValidationResult(True, ValidationType.VALIDATION_REGEX, "response matched validation regex")
        return ValidationResult(False, ValidationType.VALIDATION_REGEX, "response did not match")

    def wait_for_callback(
        self,
        payload: Payload,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ValidationResult:
        # 콜백 서버가 없는 세션은 기다리지 않고 바로 미확인으로 끝낸다.
        if self.callback_client is None or not payload.callback_secret:
            return ValidationResult(False, ValidationType.VALIDATION_CALLBACK, "callback server not configured")

        timeout_value = self.default_timeout if timeout is None else max(timeout, 0.0)
        waiter = cancel_event or threading.Event()
        deadline = self.clock() + timeout_value

        while not waiter.is_set():
            if self._poll(payload):
                return ValidationResult(True, ValidationType.VALIDATION_CALLBACK, "callback interaction recorded")
            remaining = deadline - self.clock()
            if remaining <= 0:
                return ValidationResult(
                    False,
                    ValidationType.VALIDATION_CALLBACK,
                    f"no callback within {timeout_value:g}s",
                )
            # Event.wait는 취소 신호가 오면 즉시 깨어난다.
            waiter.wait(min(self.poll_interval, remaining))

        logger.info("Callback wait for payload %s cancelled", payload.name)
        return ValidationResult(False, ValidationType.VALIDATION_CALLBACK, "callback wait cancelled")

    def _poll(self, payload: Payload) -> bool:
        try:
            return self.callback_client.has_interaction(payload.callback_secret, since=payload.created_at)
        except AdapterError as exc:
            # 네트워크 오류는 이번 폴링의 미검출로 보고 남은 시간 동안 다시 조회한다.
            logger.warning("Callback lookup failed for payload %s: %s", payload.name, exc)
            return False
