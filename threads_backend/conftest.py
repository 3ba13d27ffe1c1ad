# conftest.py
"""
테스트 공용 fixture

실제 Firestore 대신 메모리 기반 클라이언트를 FirestoreConnection에 주입합니다.
서비스 코드가 사용하는 기능(document get/set/update, where/order_by/offset/limit,
count 집계, write batch, ArrayUnion)만 흉내냅니다.
"""

import copy
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from firebase_admin import firestore
from google.api_core.exceptions import NotFound

from app import create_app


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeAggregationResult:
    def __init__(self, value):
        self.value = value


class FakeAggregationQuery:
    def __init__(self, query):
        self._query = query

    def get(self):
        return [[FakeAggregationResult(len(self._query._matching()))]]


class FakeDocumentReference:
    def __init__(self, client, collection_name, doc_id):
        self._client = client
        self._collection_name = collection_name
        self.id = doc_id

    @property
    def path(self):
        return f"{self._collection_name}/{self.id}"

    def get(self):
        return FakeSnapshot(self, self._client._read(self._collection_name, self.id))

    def set(self, data, merge=False):
        batch = self._client.batch()
        batch.set(self, data, merge=merge)
        batch.commit()

    def update(self, data):
        batch = self._client.batch()
        batch.update(self, data)
        batch.commit()


class FakeQuery:
    def __init__(self, client, collection_name, filters=(), orders=(), offset=0, limit=None):
        self._client = client
        self._collection_name = collection_name
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._offset = offset
        self._limit = limit

    def _copy(self, **changes):
        params = dict(filters=self._filters, orders=self._orders, offset=self._offset, limit=self._limit)
        params.update(changes)
        return FakeQuery(self._client, self._collection_name, **params)

    def where(self, field_path, op_string, value):
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path, direction=firestore.Query.ASCENDING):
        return self._copy(orders=self._orders + ((field_path, direction),))

    def offset(self, num_to_skip):
        return self._copy(offset=num_to_skip)

    def limit(self, count):
        return self._copy(limit=count)

    def count(self):
        return FakeAggregationQuery(self)

    def _matches(self, data):
        for field_path, op_string, value in self._filters:
            current = data.get(field_path)
            if op_string == '==' and current != value:
                return False
            if op_string == 'in' and current not in value:
                return False
        return True

    def _matching(self):
        docs = self._client.store.get(self._collection_name, {})
        return [(doc_id, data) for doc_id, data in docs.items() if self._matches(data)]

    def stream(self):
        self._client.queries += 1
        results = self._matching()
        for field_path, direction in reversed(self._orders):
            results.sort(key=lambda item: item[1].get(field_path),
                         reverse=direction == firestore.Query.DESCENDING)
        results = results[self._offset:]
        if self._limit is not None:
            results = results[:self._limit]
        for doc_id, data in results:
            reference = FakeDocumentReference(self._client, self._collection_name, doc_id)
            yield FakeSnapshot(reference, copy.deepcopy(data))

    def get(self):
        return list(self.stream())


class FakeCollectionReference(FakeQuery):
    def __init__(self, client, collection_name):
        super().__init__(client, collection_name)
        self.id = collection_name

    def document(self, document_id=None):
        return FakeDocumentReference(self._client, self._collection_name, document_id or uuid.uuid4().hex)


class FakeWriteBatch:
    """커밋 시점에 모든 쓰기를 검증한 뒤 한꺼번에 적용합니다."""
    def __init__(self, client):
        self._client = client
        self._writes = []

    def set(self, reference, document_data, merge=False):
        self._writes.append(('set', reference, document_data, merge))
        return self

    def update(self, reference, field_updates):
        self._writes.append(('update', reference, field_updates, True))
        return self

    def commit(self):
        if self._client.fail_commits_with is not None:
            raise self._client.fail_commits_with

        staged = copy.deepcopy(self._client.store)
        for kind, reference, data, merge in self._writes:
            docs = staged.setdefault(reference._collection_name, {})
            existing = docs.get(reference.id)
            if kind == 'update' and existing is None:
                raise NotFound(f"No document to update: {reference.path}")
            base = dict(existing) if (existing is not None and merge) else {}
            docs[reference.id] = _apply_transforms(base, data)

        self._client.store = staged
        self._client.commits += 1
        return []


def _apply_transforms(base, data):
    for key, value in data.items():
        if isinstance(value, firestore.ArrayUnion):
            current = list(base.get(key) or [])
            current.extend(item for item in value.values if item not in current)
            base[key] = current
        else:
            base[key] = copy.deepcopy(value)
    return base


class FakeFirestoreClient:
    def __init__(self):
        self.store = {}
        self.commits = 0
        self.queries = 0
        # 예외 객체를 넣으면 이후 모든 batch commit이 그 예외로 실패합니다.
        self.fail_commits_with = None

    def collection(self, collection_name):
        return FakeCollectionReference(self, collection_name)

    def batch(self):
        return FakeWriteBatch(self)

    def _read(self, collection_name, doc_id):
        return copy.deepcopy(self.store.get(collection_name, {}).get(doc_id))


# =====================================================================================
# 데이터 준비 헬퍼
# =====================================================================================
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

class Seeder:
    """서비스를 거치지 않고 문서를 직접 넣는 헬퍼."""
    def __init__(self, db):
        self.db = db

    def user(self, user_id, name, image=None):
        self.db.store.setdefault('users', {})[user_id] = {
            'user_id': user_id, 'name': name, 'image': image, 'threads': []
        }

    def thread(self, thread_id, author, text=None, minutes=0, parent_id=None, children=None):
        """created_at을 BASE_TIME + minutes로 고정합니다."""
        self.db.store.setdefault('threads', {})[thread_id] = {
            'thread_id': thread_id,
            'text': text or f"text of {thread_id}",
            'author': author,
            'community': None,
            'parent_id': parent_id,
            'children': list(children or []),
            'created_at': BASE_TIME + timedelta(minutes=minutes),
        }


@pytest.fixture
def fake_db():
    return FakeFirestoreClient()

@pytest.fixture
def seed(fake_db):
    return Seeder(fake_db)

@pytest.fixture
def app(fake_db):
    return create_app('testing', firestore_client=fake_db)

@pytest.fixture
def client(app):
    return app.test_client()
