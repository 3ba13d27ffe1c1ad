# app/models/user.py
from dataclasses import dataclass, field
from typing import Optional, List

# 다른 스레드 응답에 작성자로 포함될 때 노출되는 필드
PUBLIC_USER_FIELDS = ('user_id', 'name', 'parent_id', 'image')

@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    user_id: str
    name: str
    image: Optional[str] = None
    threads: List[str] = field(default_factory=list)  # 작성한 스레드 ID (추가만 됨)
