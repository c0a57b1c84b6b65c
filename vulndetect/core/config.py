"""이 파일은 .py 설정 모듈로 경로와 콜백 서버/실행 기본값을 정의합니다."""

import os
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_DIR = Path(__file__).resolve().parents[1]
PLUGINS_DIR = Path(os.getenv("VULNDETECT_PLUGINS_DIR", str(REPO_ROOT / "plugins")))
PAYLOAD_DATA_DIR = PACKAGE_DIR / "payload" / "data"
DEFAULT_PAYLOAD_FILE = PAYLOAD_DATA_DIR / "payload_definitions.yml"

LOG_LEVEL = os.getenv("VULNDETECT_LOG_LEVEL", "INFO")

# 콜백 서버 주소가 비어 있으면 콜백 기반 검증은 비활성화된다.
CALLBACK_ADDRESS = os.getenv("VULNDETECT_CALLBACK_ADDRESS", "")
CALLBACK_PORT = int(os.getenv("VULNDETECT_CALLBACK_PORT", "8881"))
CALLBACK_POLLING_URI = os.getenv("VULNDETECT_CALLBACK_POLLING_URI", "")
CALLBACK_DOMAIN = os.getenv("VULNDETECT_CALLBACK_DOMAIN", "")

# 콜백 기록을 기다리는 최대 시간과 폴링 간격(초)이다.
CALLBACK_TIMEOUT_SECONDS = float(os.getenv("VULNDETECT_CALLBACK_TIMEOUT", "10"))
POLL_INTERVAL_SECONDS = float(os.getenv("VULNDETECT_POLL_INTERVAL", "1"))
# 폴링 간격의 하한이다. 0 이하 값으로 콜백 서버를 연속 조회하지 않게 한다.
MIN_POLL_INTERVAL_SECONDS = 0.05
HTTP_TIMEOUT_SECONDS = int(os.getenv("VULNDETECT_HTTP_TIMEOUT", "5"))

# 플러그인 x 서비스 실행을 동시에 몇 개까지 돌릴지 제한한다.
MAX_WORKERS = int(os.getenv("VULNDETECT_MAX_WORKERS", "8"))
