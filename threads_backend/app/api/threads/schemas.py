# app/api/threads/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

# --- 재사용을 위한 중첩 스키마 ---
class AuthorSchema(Schema):
    """스레드 응답에 포함될 작성자 정보 스키마."""
    user_id = fields.Str(required=True)
    name = fields.Str(required=True)
    image = fields.Str(allow_none=True)
    # 목록 조회의 최상위 스레드 작성자는 전체 사용자 문서로 채워집니다.
    threads = fields.List(fields.Str())

# --- API 요청/응답 스키마 ---

class ThreadCreateSchema(Schema):
    """POST /api/threads 요청 본문의 유효성을 검사합니다."""
    text = fields.Str(required=True, validate=validate.Length(min=1))
    author = fields.Str(required=True, validate=validate.Length(min=1))
    community_id = fields.Str(load_default=None, allow_none=True)
    path = fields.Str(required=True, validate=validate.Length(min=1))

class CommentCreateSchema(Schema):
    """POST /api/threads/{thread_id}/comments 요청 본문의 유효성을 검사합니다."""
    text = fields.Str(required=True, validate=validate.Length(min=1, error="댓글 내용을 입력해야 합니다."))
    user_id = fields.Str(required=True, validate=validate.Length(min=1))
    path = fields.Str(required=True, validate=validate.Length(min=1))

class ThreadListQuerySchema(Schema):
    """GET /api/threads 쿼리스트링의 유효성을 검사합니다."""
    class Meta:
        unknown = EXCLUDE

    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    page_size = fields.Int(load_default=None, validate=validate.Range(min=1))

class ThreadResponseSchema(Schema):
    """
    스레드 응답을 위한 JSON 형식.
    author와 children은 조회 깊이에 따라 채워진 객체이거나 ID 그대로일 수 있습니다.
    """
    thread_id = fields.Str(required=True)
    text = fields.Str(required=True)
    author = fields.Method('dump_author')
    community = fields.Str(allow_none=True)
    parent_id = fields.Str(allow_none=True)
    children = fields.Method('dump_children')
    created_at = fields.DateTime(required=True)

    def dump_author(self, obj):
        author = obj.get('author')
        if isinstance(author, dict):
            return AuthorSchema().dump(author)
        return author

    def dump_children(self, obj):
        return [
            ThreadResponseSchema().dump(child) if isinstance(child, dict) else child
            for child in obj.get('children') or []
        ]
