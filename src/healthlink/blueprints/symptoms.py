from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify

from ..schemas import SymptomAnalyzeRequest, parse_body
from ..storage import SymptomAnalysis
from . import dispatch_failed, fails_with, get_brain, get_storage, json_error, user_id_arg

bp = Blueprint('symptoms', __name__)

URGENCY_LEVELS = ('low', 'medium', 'high')


def _confidence(value: Any) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    if number != number:
        return 0
    number = max(0.0, min(100.0, number))
    return int(number) if number.is_integer() else number


def normalize_symptom_analysis(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce a model reply into the shape the client renders.

    Extra keys the model returned (differential diagnosis, red flags, ...)
    are kept as-is.
    """
    raw = raw if isinstance(raw, dict) else {}
    out = dict(raw)
    recommendations = raw.get('recommendations')
    urgency = str(raw.get('urgency') or '').strip().lower()
    out.update({
        'condition': raw.get('condition') or 'Unable to determine',
        'confidence': _confidence(raw.get('confidence')),
        'description': raw.get('description') or 'Unable to provide analysis',
        'recommendations': recommendations if isinstance(recommendations, list) else [],
        'urgency': urgency if urgency in URGENCY_LEVELS else 'medium',
    })
    return out


@bp.route('/analyze', methods=['POST'])
@fails_with('Failed to analyze symptoms')
def analyze():
    """Body: { symptoms (>= 10 chars), age?, gender?, duration?, history?, userId? } -> { id, analysis }"""
    body = parse_body(SymptomAnalyzeRequest)
    patient_info = {
        'age': body.age,
        'gender': body.gender,
        'duration': body.duration,
        'history': body.history,
    }
    result = get_brain().analyze_symptoms(body.symptoms, patient_info, user_id=body.user_id)
    if not result.success:
        return dispatch_failed(result, 'Failed to analyze symptoms')

    analysis = normalize_symptom_analysis(result.data)
    saved = get_storage().create_symptom_analysis(SymptomAnalysis(
        symptoms=body.symptoms,
        analysis=analysis,
        user_id=body.user_id,
        age=body.age,
        gender=body.gender,
        duration=body.duration,
    ))
    return jsonify({'id': saved.id, 'analysis': analysis})


@bp.route('/history', methods=['GET'])
@fails_with('Failed to fetch symptom history')
def history():
    user_id = user_id_arg()
    if not user_id:
        return json_error('User ID is required', 400)
    return jsonify([a.to_dict() for a in get_storage().get_symptom_analyses(user_id)])
