# app/api/threads/services.py
import logging
import uuid
from dataclasses import asdict
from firebase_admin import firestore
from typing import Optional, Dict, Any, Tuple, List

from app.models.thread import Thread
from app.models.user import PUBLIC_USER_FIELDS
from app.utils.datetime_utils import DateTimeUtils

class ThreadNotFoundError(ValueError):
    """댓글을 달 부모 스레드가 존재하지 않을 때 발생합니다."""


class ThreadService:
    """
    스레드(게시글)와 댓글 관련 데이터 접근을 담당하는 서비스 클래스.
    - 'threads'와 'users' 두 컬렉션을 다룹니다.
    - Firestore 클라이언트는 FirestoreConnection에서 생성자로 주입받습니다.
    """
    def __init__(self, db):
        self.db = db
        self.threads_ref = self.db.collection('threads')
        self.users_ref = self.db.collection('users')

    def create_thread(self, text: str, author_id: str, community_id: Optional[str] = None) -> str:
        """
        새 스레드를 저장하고 작성자의 threads 목록에 ID를 추가합니다.
        두 쓰기는 하나의 batch로 커밋되므로 작성자 문서가 없으면 아무것도 저장되지 않습니다.
        """
        # TODO: 커뮤니티 기능이 생기면 community_id를 검증해서 저장하고 조회 시 채워 넣기
        thread_id = str(uuid.uuid4())
        new_thread = Thread(thread_id=thread_id, text=text, author=author_id, community=None)

        try:
            batch = self.db.batch()
            batch.set(self.threads_ref.document(thread_id), DateTimeUtils.for_firestore(asdict(new_thread)))
            batch.update(self.users_ref.document(author_id), {'threads': firestore.ArrayUnion([thread_id])})
            batch.commit()
            logging.info(f"스레드 생성 완료 (thread_id: {thread_id}, author: {author_id})")
            return thread_id
        except Exception as e:
            logging.error(f"스레드 생성 실패 (author: {author_id}): {e}", exc_info=True)
            raise

    def list_top_level_threads(self, page_number: int = 1, page_size: int = 20) -> Tuple[List[Dict[str, Any]], bool]:
        """
        최상위 스레드(parent_id가 없는 스레드)를 최신순으로 페이지 단위 조회합니다.

        :param page_number: 1부터 시작하는 페이지 번호
        :param page_size: 페이지당 스레드 수
        :return: (작성자와 댓글이 채워진 스레드 목록, 다음 페이지 존재 여부)
        """
        if page_number < 1 or page_size < 1:
            raise ValueError("page_number와 page_size는 1 이상이어야 합니다.")

        skip_amount = (page_number - 1) * page_size
        threads_query = (
            self._top_level_query()
            .order_by('created_at', direction=firestore.Query.DESCENDING)
            .offset(skip_amount)
            .limit(page_size)
        )

        # 전체 개수와 페이지는 서로 다른 읽기라서, 그 사이에 생성된 스레드가 있으면 is_next_page가 하나 어긋날 수 있음
        total_threads_count = self.count_top_level_threads()

        threads = [self._to_dict(doc) for doc in threads_query.stream()]
        users_cache: Dict[str, Optional[Dict[str, Any]]] = {}
        for thread in threads:
            author = self._load_user(thread.get('author'), users_cache)
            thread['author'] = dict(author) if author else None
            self._resolve_children(thread, users_cache, depth=1)

        is_next_page = total_threads_count > skip_amount + len(threads)
        return threads, is_next_page

    def get_thread_by_id(self, thread_id: str) -> Optional[Dict[str, Any]]:
        """
        스레드 하나를 댓글 트리와 함께 조회합니다.
        - 댓글과 대댓글까지(두 단계) 스레드 문서와 작성자 공개 정보로 채워집니다.
        - 그보다 깊은 children은 ID 목록 그대로 반환됩니다.
        - 스레드가 없으면 None을 반환합니다.
        """
        doc = self.threads_ref.document(thread_id).get()
        if not doc.exists:
            return None

        thread = self._to_dict(doc)
        users_cache: Dict[str, Optional[Dict[str, Any]]] = {}
        thread['author'] = self._public_user(thread.get('author'), users_cache)
        self._resolve_children(thread, users_cache, depth=2)
        return thread

    def add_comment_to_thread(self, thread_id: str, comment_text: str, user_id: str) -> str:
        """
        스레드에 댓글을 추가합니다.
        댓글 생성과 부모 스레드의 children 추가는 하나의 batch로 커밋됩니다.
        """
        thread_ref = self.threads_ref.document(thread_id)
        if not thread_ref.get().exists:
            raise ThreadNotFoundError("Thread not found")

        comment_id = str(uuid.uuid4())
        comment_thread = Thread(thread_id=comment_id, text=comment_text, author=user_id, parent_id=thread_id)

        try:
            batch = self.db.batch()
            batch.set(self.threads_ref.document(comment_id), DateTimeUtils.for_firestore(asdict(comment_thread)))
            batch.update(thread_ref, {'children': firestore.ArrayUnion([comment_id])})
            batch.commit()
            logging.info(f"댓글 생성 완료 (thread_id: {thread_id}, comment_id: {comment_id})")
            return comment_id
        except Exception as e:
            logging.error(f"댓글 생성 실패 (thread_id: {thread_id}): {e}", exc_info=True)
            raise

    def count_top_level_threads(self) -> int:
        """최상위 스레드의 총 개수를 반환합니다."""
        return self._top_level_query().count().get()[0][0].value

    def _top_level_query(self):
        return self.threads_ref.where('parent_id', '==', None)

    def _to_dict(self, doc) -> Dict[str, Any]:
        return DateTimeUtils.from_firestore(doc.to_dict())

    def _load_user(self, user_id: Optional[str], users_cache: Dict[str, Optional[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
        """사용자 문서를 읽습니다. 한 요청 안에서 같은 사용자는 한 번만 조회합니다."""
        if not user_id:
            return None
        if user_id not in users_cache:
            user_doc = self.users_ref.document(user_id).get()
            users_cache[user_id] = self._to_dict(user_doc) if user_doc.exists else None
        return users_cache[user_id]

    def _public_user(self, user_id: Optional[str], users_cache: Dict[str, Optional[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
        user = self._load_user(user_id, users_cache)
        if user is None:
            return None
        return {key: user[key] for key in PUBLIC_USER_FIELDS if key in user}

    def _resolve_children(self, thread: Dict[str, Any], users_cache: Dict[str, Optional[Dict[str, Any]]], depth: int) -> None:
        """
        thread['children']의 ID를 스레드 문서로 바꾸고 각 작성자를 공개 정보로 채웁니다.
        depth가 1보다 크면 댓글의 children에도 같은 작업을 반복합니다.
        존재하지 않는 댓글 ID는 결과에서 빠집니다.
        """
        children = []
        for child_id in thread.get('children') or []:
            child_doc = self.threads_ref.document(child_id).get()
            if not child_doc.exists:
                continue
            child = self._to_dict(child_doc)
            child['author'] = self._public_user(child.get('author'), users_cache)
            if depth > 1:
                self._resolve_children(child, users_cache, depth - 1)
            children.append(child)
        thread['children'] = children
