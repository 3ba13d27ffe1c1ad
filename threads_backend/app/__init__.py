# app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

# - 설정
from app.core.config import config_by_name
from app.core.database import FirestoreConnection

# - API 블루프린트
from app.api.threads.routes import threads_bp

# - 서비스 모듈
from app.api.threads.actions import ThreadActions
from app.services.revalidation_service import RevalidationService

def create_app(config_name=None, firestore_client=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (생략 시 FLASK_ENV)
    :param firestore_client: 직접 주입할 Firestore 클라이언트 (테스트용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. Firestore 연결
    # =====================================================================================
    connection = FirestoreConnection(
        credentials_path=app.config['FIREBASE_CREDENTIALS_PATH'],
        project_id=app.config['FIREBASE_PROJECT_ID'],
        client=firestore_client
    )
    # 연결에 실패해도 앱은 뜹니다. 이후 액션 호출 시 다시 연결을 시도하고 실패하면 오류를 반환합니다.
    result = connection.ensure_connected()
    if not result.connected:
        logging.warning(f"Firestore 연결 없이 앱을 시작합니다: {result.message}")

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}
    app.services['database'] = connection
    app.services['revalidation'] = RevalidationService(max_entries=app.config['REVALIDATION_MAX_ENTRIES'])
    app.services['threads'] = ThreadActions(
        connection=connection,
        revalidation_service=app.services['revalidation']
    )

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(threads_bp, url_prefix='/api/threads')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 404, 405 같은 HTTP 예외는 Flask 기본 응답을 그대로 사용
        if isinstance(err, HTTPException):
            return err
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
