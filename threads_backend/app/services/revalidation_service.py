# app/services/revalidation_service.py
import logging
import threading
from collections import OrderedDict
from typing import Optional, Any, Tuple

class RevalidationService:
    """
    GET 응답을 route path 단위로 캐시하고, 쓰기 작업 후 해당 path의 캐시를 무효화하는 공용 서비스.
    - 같은 path라도 query 키가 다르면 별도 항목으로 저장합니다.
    - 최대 max_entries개까지 저장하며, 넘치면 가장 오래 사용하지 않은 항목부터 지웁니다.
    """
    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._entries: "OrderedDict[Tuple[str, str], Any]" = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, path: str, query: str = "") -> Optional[Any]:
        key = (self._normalize(path), query)
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def store(self, path: str, query: str, payload: Any) -> None:
        key = (self._normalize(path), query)
        with self._lock:
            self._entries[key] = payload
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def revalidate_path(self, path: str, nested: bool = False) -> int:
        """
        path에 해당하는 캐시를 모두 지웁니다.

        :param path: 무효화할 route path (예: '/api/threads')
        :param nested: True이면 path 아래의 모든 하위 path도 함께 지웁니다.
        :return: 삭제된 캐시 항목 수
        """
        target = self._normalize(path)
        prefix = target if target.endswith('/') else target + '/'
        with self._lock:
            stale = [
                key for key in self._entries
                if key[0] == target or (nested and key[0].startswith(prefix))
            ]
            for key in stale:
                del self._entries[key]
        logging.info(f"캐시 무효화 완료 (path: {path}, entries: {len(stale)})")
        return len(stale)

    @staticmethod
    def _normalize(path: str) -> str:
        # '/api/threads'와 '/api/threads/'는 같은 path로 취급
        if len(path) > 1:
            return path.rstrip('/')
        return path
