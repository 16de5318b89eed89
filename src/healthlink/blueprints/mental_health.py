from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from flask import Blueprint, jsonify

from ..schemas import MentalHealthAssessmentRequest, parse_body
from ..storage import MentalHealthAssessment
from . import dispatch_failed, fails_with, get_brain, get_storage, user_id_arg

bp = Blueprint('mental_health', __name__)

RISK_LEVELS = ('low', 'medium', 'high')


def _score(value: Any) -> int:
    try:
        return int(round(float(value or 0)))
    except (TypeError, ValueError):
        return 0


def _iso_date(value: Any) -> Optional[str]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


@bp.route('', methods=['GET'])
@fails_with('Failed to fetch mental health assessments')
def list_assessments():
    return jsonify([a.to_dict() for a in get_storage().get_mental_health_assessments(user_id_arg())])


@bp.route('', methods=['POST'])
@fails_with('Failed to create mental health assessment')
def create_assessment():
    """Body: { assessmentType, responses, userId? }"""
    body = parse_body(MentalHealthAssessmentRequest)
    result = get_brain().assess_mental_health(body.assessment_type, body.responses, user_id=body.user_id)
    if not result.success:
        return dispatch_failed(result, 'Mental health assessment failed')

    data = result.data or {}
    risk = str(data.get('riskLevel') or '').strip().lower()
    assessment = get_storage().create_mental_health_assessment(MentalHealthAssessment(
        assessment_type=body.assessment_type,
        responses=body.responses,
        user_id=body.user_id,
        score=_score(data.get('score')),
        risk_level=risk if risk in RISK_LEVELS else 'low',
        recommendations=data.get('recommendations') or {},
        follow_up_date=_iso_date(data.get('followUpDate')),
    ))
    return jsonify(assessment.to_dict())
