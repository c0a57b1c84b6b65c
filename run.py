"""이 파일은 .py 엔트리포인트로 플러그인과 페이로드 카탈로그 로딩을 확인합니다."""

import logging

from vulndetect.adapters.callback import create_callback_client
from vulndetect.core.logging import setup_logging
from vulndetect.payload.catalog import PayloadCatalog
from vulndetect.payload.generator import PayloadGenerator
from vulndetect.payload.validator import PayloadValidator
from vulndetect.services.orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging()
    orchestrator = Orchestrator()
    orchestrator.run()
    catalog = PayloadCatalog.from_default()
    # 콜백 서버 설정(VULNDETECT_CALLBACK_*)이 있으면 생성기와 검증기가 같은 클라이언트를 쓴다.
    callback_client = create_callback_client()
    generator = PayloadGenerator(catalog, callback_client=callback_client)
    validator = PayloadValidator(callback_client=callback_client)
    logger.info(
        "Payload catalog ready with %d entries (callback server %s, poll interval %gs)",
        len(catalog),
        "enabled" if generator.is_callback_server_enabled() else "disabled",
        validator.poll_interval,
    )


if __name__ == "__main__":
    main()
