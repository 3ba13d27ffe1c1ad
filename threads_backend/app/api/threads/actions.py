# app/api/threads/actions.py
from typing import Optional, Dict, Any, Callable

from app.api.threads.services import ThreadService
from app.core.database import FirestoreConnection
from app.services.revalidation_service import RevalidationService

class ThreadActionError(Exception):
    """
    스레드 액션 실패 시 발생하는 예외.
    메시지는 '<작업별 접두어>: <원래 오류 메시지>' 형식이며, 원래 예외는 __cause__에 남습니다.
    """


class ThreadActions:
    """
    라우트에서 호출하는 스레드 액션 계층.
    - 매 호출마다 DB 연결을 확인하고 ThreadService를 통해 작업을 수행합니다.
    - 쓰기 작업이 성공하면 전달받은 path의 캐시를 무효화합니다.
    - 모든 오류는 작업별 접두어가 붙은 ThreadActionError로 바꿔 던집니다.
    """
    def __init__(self, connection: FirestoreConnection, revalidation_service: RevalidationService,
                 service_factory: Callable[[Any], ThreadService] = ThreadService):
        self.connection = connection
        self.revalidation_service = revalidation_service
        self.service_factory = service_factory

    def _service(self) -> ThreadService:
        result = self.connection.ensure_connected()
        if not result.connected:
            raise ConnectionError(result.message)
        return self.service_factory(self.connection.client)

    def create_thread(self, text: str, author: str, community_id: Optional[str], path: str) -> None:
        try:
            self._service().create_thread(text, author, community_id)
            self.revalidation_service.revalidate_path(path)
        except Exception as e:
            raise ThreadActionError(f"Error creating thread: {e}") from e

    def fetch_threads(self, page_number: int = 1, page_size: int = 20) -> Dict[str, Any]:
        try:
            threads, is_next_page = self._service().list_top_level_threads(page_number, page_size)
            return {"threads": threads, "is_next_page": is_next_page}
        except Exception as e:
            raise ThreadActionError(f"Error fetching threads: {e}") from e

    def fetch_thread_by_id(self, thread_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self._service().get_thread_by_id(thread_id)
        except Exception as e:
            raise ThreadActionError(f"Error fetching thread by id: {e}") from e

    def add_comment_to_thread(self, thread_id: str, comment_text: str, user_id: str, path: str) -> None:
        try:
            self._service().add_comment_to_thread(thread_id, comment_text, user_id)
            self.revalidation_service.revalidate_path(path)
        except Exception as e:
            raise ThreadActionError(f"Error adding comment to thread: {e}") from e
