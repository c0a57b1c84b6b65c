"""이 파일은 .py 공통 예외 모듈로 오류 유형을 표준화합니다."""


class PluginDefinitionError(ValueError):
    """플러그인 정의 메타데이터가 규칙을 위반할 때 사용합니다."""


class PluginRegistryError(KeyError):
    """레지스트리 등록/조회 오류에 사용합니다."""


class PayloadCatalogError(ValueError):
    """페이로드 카탈로그 로딩 중 잘못된 항목을 발견했을 때 사용합니다."""


class AdapterError(RuntimeError):
    """외부 어댑터(콜백 서버 등) 실행 오류에 사용합니다."""
