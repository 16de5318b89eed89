from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify

from ..brain.prompts import CHAT_SYSTEM_PROMPT
from ..errors import NotFoundError
from ..schemas import ChatMessageRequest, ChatSessionCreate, parse_body
from ..storage import ChatSession
from ..storage.models import new_id, utcnow_iso
from . import dispatch_failed, fails_with, get_brain, get_storage, json_error, user_id_arg

bp = Blueprint('chat', __name__)


def _message(role: str, content: str) -> Dict[str, Any]:
    return {'id': new_id(), 'role': role, 'content': content, 'timestamp': utcnow_iso()}


@bp.route('/sessions', methods=['POST'])
@fails_with('Failed to create chat session')
def create_session():
    body = parse_body(ChatSessionCreate)
    session = get_storage().create_chat_session(ChatSession(
        user_id=body.user_id,
        messages=[m.model_dump(exclude_none=True) for m in body.messages],
    ))
    return jsonify(session.to_dict()), 201


@bp.route('/sessions', methods=['GET'])
@fails_with('Failed to fetch chat sessions')
def list_sessions():
    user_id = user_id_arg()
    if not user_id:
        return json_error('User ID is required', 400)
    return jsonify([s.to_dict() for s in get_storage().get_chat_sessions(user_id)])


@bp.route('/message', methods=['POST'])
@fails_with('Failed to process chat message')
def post_message():
    """Body: { sessionId, message, messages[] } -> { message, sessionId }

    ``messages`` is the conversation so far as the client holds it; the user
    turn and the assistant reply are appended and saved on the session.
    """
    body = parse_body(ChatMessageRequest)
    storage = get_storage()
    session = storage.get_chat_session(body.session_id)
    if session is None:
        raise NotFoundError('Chat session not found')

    conversation = [m.model_dump(exclude_none=True) for m in body.messages]
    conversation.append(_message('user', body.message))
    prompt = [{'role': 'system', 'content': CHAT_SYSTEM_PROMPT}]
    prompt += [{'role': m['role'], 'content': m['content']} for m in conversation if m['role'] != 'system']

    result = get_brain().chat(prompt, user_id=session.user_id)
    if not result.success:
        return dispatch_failed(result, 'Failed to process chat message')

    reply = _message('assistant', result.data)
    conversation.append(reply)
    storage.update_chat_session(body.session_id, conversation)
    return jsonify({'message': reply, 'sessionId': body.session_id})
