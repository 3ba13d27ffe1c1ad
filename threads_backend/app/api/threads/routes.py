# app/api/threads/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app, url_for
from marshmallow import ValidationError

from app.api.threads.actions import ThreadActionError
from app.api.threads.services import ThreadNotFoundError
from app.api.threads.schemas import (
    ThreadCreateSchema, CommentCreateSchema, ThreadListQuerySchema, ThreadResponseSchema
)


threads_bp = Blueprint('threads_bp', __name__)

def _cached(build_response, query=""):
    """
    현재 요청 path와 query 키의 캐시가 있으면 그대로 반환하고, 없으면 build_response()로 만든 응답을 저장합니다.
    query는 원본 쿼리스트링이 아니라 검증된 값으로 만든 키입니다.
    build_response는 (body, status) 튜플을 반환하며 200일 때만 캐시합니다.
    """
    revalidation_service = current_app.services['revalidation']
    cached = revalidation_service.get(request.path, query)
    if cached is not None:
        return jsonify(cached), 200

    body, status = build_response()
    if status == 200:
        revalidation_service.store(request.path, query, body)
    return jsonify(body), status


def _revalidate_thread_resources():
    """
    스레드 API의 GET 캐시(목록과 모든 상세)를 지웁니다.
    댓글은 부모뿐 아니라 조상 스레드의 상세 응답과 목록에도 나타나므로 하위 path 전체를 무효화합니다.
    """
    current_app.services['revalidation'].revalidate_path(url_for('threads_bp.get_threads'), nested=True)


@threads_bp.route('/', methods=['POST'])
def create_thread():
    thread_actions = current_app.services['threads']
    """
    새로운 스레드를 생성합니다.
    - 성공 시 요청 본문의 path와 스레드 API의 GET 캐시가 무효화됩니다.
    """
    try:
        data = ThreadCreateSchema().load(request.get_json() or {})
        thread_actions.create_thread(data['text'], data['author'], data['community_id'], data['path'])
        _revalidate_thread_resources()
        return jsonify({"message": "스레드가 생성되었습니다."}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ThreadActionError as e:
        logging.error(f"스레드 생성 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "THREAD_CREATION_FAILED", "message": str(e)}), 500


@threads_bp.route('/', methods=['GET'])
def get_threads():
    """
    최상위 스레드 목록을 페이지 번호 기반으로 조회합니다.
    """
    thread_actions = current_app.services['threads']
    try:
        args = ThreadListQuerySchema().load(request.args)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    page_size = args['page_size'] or current_app.config['THREADS_PAGE_SIZE']

    def build_response():
        try:
            result = thread_actions.fetch_threads(args['page'], page_size)
            return {
                "threads": ThreadResponseSchema(many=True).dump(result['threads']),
                "is_next_page": result['is_next_page']
            }, 200
        except ThreadActionError as e:
            logging.error(f"스레드 목록 조회 중 오류 발생: {e}", exc_info=True)
            return {"error_code": "INTERNAL_SERVER_ERROR", "message": str(e)}, 500

    return _cached(build_response, query=f"page={args['page']}&page_size={page_size}")


@threads_bp.route('/<string:thread_id>', methods=['GET'])
def get_thread(thread_id: str):
    """
    스레드 하나를 댓글, 대댓글과 함께 조회합니다.
    """
    thread_actions = current_app.services['threads']

    def build_response():
        try:
            thread = thread_actions.fetch_thread_by_id(thread_id)
        except ThreadActionError as e:
            logging.error(f"스레드 조회 중 오류 발생 (thread_id: {thread_id}): {e}", exc_info=True)
            return {"error_code": "INTERNAL_SERVER_ERROR", "message": str(e)}, 500
        if not thread:
            return {"error_code": "THREAD_NOT_FOUND", "message": "스레드를 찾을 수 없습니다."}, 404
        return ThreadResponseSchema().dump(thread), 200

    return _cached(build_response)


@threads_bp.route('/<string:thread_id>/comments', methods=['POST'])
def add_comment(thread_id: str):
    """
    스레드에 댓글을 작성합니다.
    - 부모 스레드가 없으면 404를 반환하며 아무것도 저장하지 않습니다.
    """
    thread_actions = current_app.services['threads']
    try:
        data = CommentCreateSchema().load(request.get_json() or {})
        thread_actions.add_comment_to_thread(thread_id, data['text'], data['user_id'], data['path'])
        _revalidate_thread_resources()
        return jsonify({"message": "댓글이 작성되었습니다."}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ThreadActionError as e:
        if isinstance(e.__cause__, ThreadNotFoundError): # 부모 스레드가 없는 경우
            return jsonify({"error_code": "THREAD_NOT_FOUND", "message": str(e)}), 404
        logging.error(f"댓글 작성 중 오류 발생 (thread_id: {thread_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_CREATION_FAILED", "message": str(e)}), 500
