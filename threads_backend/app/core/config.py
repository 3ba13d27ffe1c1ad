# app/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # Firestore 연결에 사용할 서비스 계정 키 파일 경로. 이 값이 없으면 DB 연결을 시도하지 않습니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    # 서비스 계정 키에 포함된 프로젝트가 아닌 다른 프로젝트를 사용할 때만 지정합니다.
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')

    # 스레드 목록 조회 시 page_size를 생략했을 때 사용할 기본값
    THREADS_PAGE_SIZE = int(os.getenv('THREADS_PAGE_SIZE', 20))
    # GET 응답 캐시에 보관할 최대 항목 수
    REVALIDATION_MAX_ENTRIES = int(os.getenv('REVALIDATION_MAX_ENTRIES', 1000))

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    # 테스트에서는 실제 Firestore 대신 주입된 클라이언트를 사용합니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')

class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False

# create_app에서 FLASK_ENV 값에 따라 설정 클래스를 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
