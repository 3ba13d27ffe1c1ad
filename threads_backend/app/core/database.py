# app/core/database.py
import logging
from dataclasses import dataclass
from typing import Optional, Any

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)


@dataclass
class ConnectionResult:
    """ensure_connected()의 결과. 호출자가 connected 값을 직접 확인해야 합니다."""
    connected: bool
    message: str
    error: Optional[Exception] = None


class FirestoreConnection:
    """
    프로세스에서 공유하는 Firestore 클라이언트 핸들을 소유합니다.
    - 서비스(레포지토리)는 이 객체가 만든 client를 생성자로 주입받습니다.
    - 연결 실패는 예외로 던지지 않고 ConnectionResult로 반환합니다.
    """
    def __init__(self, credentials_path: Optional[str] = None, project_id: Optional[str] = None, client: Any = None):
        self.credentials_path = credentials_path
        self.project_id = project_id
        self._client = client
        # 직접 주입된 클라이언트는 Firebase 앱 레지스트리와 무관하게 살아있는 것으로 봅니다.
        self._app_name: Optional[str] = None

    def is_alive(self) -> bool:
        if self._client is None:
            return False
        if self._app_name is None:
            return True
        return self._app_name in firebase_admin._apps

    def ensure_connected(self) -> ConnectionResult:
        """
        Firestore 연결을 보장합니다. 여러 번 호출해도 안전합니다.

        :return: 연결 성공 여부와 메시지를 담은 ConnectionResult
        """
        if self.is_alive():
            logger.debug("이미 Firestore에 연결되어 있습니다.")
            return ConnectionResult(True, "already connected to DB")

        if not self.credentials_path:
            logger.warning("FIREBASE_CREDENTIALS_PATH가 설정되지 않아 Firestore 연결을 건너뜁니다.")
            return ConnectionResult(False, "FIREBASE_CREDENTIALS_PATH not found")

        try:
            if not firebase_admin._apps:
                cred = credentials.Certificate(self.credentials_path)
                options = {'projectId': self.project_id} if self.project_id else None
                firebase_admin.initialize_app(cred, options)
            app = firebase_admin.get_app()
            self._client = firestore.client(app)
            self._app_name = app.name
            logger.info("Firestore 연결 성공")
            return ConnectionResult(True, "connected to DB")
        except Exception as e:
            logger.error(f"Firestore 연결 실패: {e}", exc_info=True)
            self._client = None
            self._app_name = None
            return ConnectionResult(False, str(e), error=e)

    @property
    def client(self):
        if not self.is_alive():
            raise RuntimeError("Firestore에 연결되어 있지 않습니다.")
        return self._client
