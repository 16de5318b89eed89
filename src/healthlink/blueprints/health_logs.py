from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..errors import NotFoundError
from ..schemas import HealthLogCreate, parse_body
from ..storage import HealthLog
from . import dispatch_failed, fails_with, get_brain, get_storage, json_error, user_id_arg

bp = Blueprint('health_logs', __name__)


@bp.route('/health-logs', methods=['GET'])
@fails_with('Failed to fetch health logs')
def list_health_logs():
    """Query: ?userId=...&type=... (type optional). Newest first."""
    user_id = user_id_arg()
    if not user_id:
        return json_error('User ID is required', 400)
    log_type = (request.args.get('type') or '').strip() or None
    logs = get_storage().get_health_logs(user_id, log_type)
    return jsonify([log.to_dict() for log in logs])


@bp.route('/health-logs', methods=['POST'])
@fails_with('Failed to create health log')
def create_health_log():
    body = parse_body(HealthLogCreate)
    log = get_storage().create_health_log(HealthLog(**body.model_dump()))
    return jsonify(log.to_dict()), 201


@bp.route('/health-logs/<log_id>', methods=['DELETE'])
@fails_with('Failed to delete health log')
def delete_health_log(log_id: str):
    if not get_storage().delete_health_log(log_id):
        raise NotFoundError('Health log not found')
    return '', 204


@bp.route('/health/trends', methods=['GET'])
@fails_with('Failed to analyze health trends')
def health_trends():
    user_id = user_id_arg()
    if not user_id:
        return json_error('User ID is required', 400)
    logs = get_storage().get_health_logs(user_id)
    result = get_brain().analyze_health_trends([log.to_dict() for log in logs], user_id=user_id)
    if not result.success:
        return dispatch_failed(result, 'Failed to analyze health trends')
    return jsonify({'analysis': result.data, 'logCount': len(logs)})
