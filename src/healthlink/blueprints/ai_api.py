from __future__ import annotations

from flask import Blueprint, jsonify

from ..schemas import EducationRequest, EmotionRequest, PredictionRequest, parse_body
from . import fails_with, get_brain, get_storage, user_id_arg

bp = Blueprint('ai_api', __name__)


def _envelope(result):
    return jsonify(result.to_dict()), (200 if result.success else 500)


@bp.route('/providers', methods=['GET'])
def providers():
    """Registered providers, the one requests currently go to, and any that failed to load."""
    return jsonify(get_brain().status())


@bp.route('/interactions', methods=['GET'])
@fails_with('Failed to fetch AI interactions')
def interactions():
    return jsonify([i.to_dict() for i in get_storage().get_ai_interactions(user_id_arg())])


@bp.route('/predictions', methods=['POST'])
@fails_with('Failed to predict disease trends')
def predictions():
    body = parse_body(PredictionRequest)
    return _envelope(get_brain().predict_disease_trends(body.data, body.region, user_id=body.user_id))


@bp.route('/education', methods=['POST'])
@fails_with('Failed to create educational content')
def education():
    body = parse_body(EducationRequest)
    return _envelope(get_brain().educational_query(body.query, body.level, user_id=body.user_id))


@bp.route('/emotions', methods=['POST'])
@fails_with('Failed to analyze emotions')
def emotions():
    body = parse_body(EmotionRequest)
    return _envelope(get_brain().analyze_emotions(body.data, body.type, user_id=body.user_id))
