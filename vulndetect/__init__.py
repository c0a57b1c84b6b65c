"""이 파일은 .py 패키지 초기화 모듈로 탐지 코어의 버전을 정의합니다."""

__version__ = "0.1.0"
