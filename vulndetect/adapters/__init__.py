"""이 파일은 .py 어댑터 패키지 초기화 모듈로 공통 어댑터를 노출합니다."""

from .callback import CallbackClient, CallbackServerConfig, callback_id, create_callback_client
from .http import HttpClient, HttpResult

__all__ = [
    "CallbackClient",
    "CallbackServerConfig",
    "HttpClient",
    "HttpResult",
    "callback_id",
    "create_callback_client",
]
