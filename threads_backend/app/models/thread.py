# app/models/thread.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from app.utils.datetime_utils import DateTimeUtils

@dataclass
class Thread:
    """
    Firestore 'threads' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    최상위 스레드는 parent_id가 None이고, 댓글(답글)은 부모 스레드의 ID를 가집니다.
    """
    thread_id: str
    text: str
    author: str  # users 컬렉션의 문서 ID
    community: Optional[str] = None  # 커뮤니티 기능 미구현, 항상 None으로 저장
    parent_id: Optional[str] = None
    children: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=DateTimeUtils.now)
