from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify

from ..schemas import FitnessPlanRequest, parse_body
from ..storage import FitnessPlan
from . import dispatch_failed, fails_with, get_brain, get_storage, user_id_arg

bp = Blueprint('fitness', __name__)

FITNESS_LEVELS = ('beginner', 'intermediate', 'advanced')


def derive_fitness_level(profile: Dict[str, Any]) -> str:
    """``experience`` wins when it names a level; otherwise map ``activityLevel``."""
    profile = profile or {}
    experience = str(profile.get('experience') or '').strip().lower()
    if experience in FITNESS_LEVELS:
        return experience
    activity = profile.get('activityLevel')
    if activity in ('very_active', 'extremely_active'):
        return 'advanced'
    if activity == 'moderately_active':
        return 'intermediate'
    return 'beginner'


def _first(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key):
            return data[key]
    return {}


@bp.route('', methods=['GET'])
@fails_with('Failed to fetch fitness plans')
def list_plans():
    return jsonify([p.to_dict() for p in get_storage().get_fitness_plans(user_id_arg())])


@bp.route('', methods=['POST'])
@fails_with('Failed to create fitness plan')
def create_plan():
    """Body: { goals, userProfile?, userId? }"""
    body = parse_body(FitnessPlanRequest)
    result = get_brain().create_fitness_plan(body.user_profile, body.goals, user_id=body.user_id)
    if not result.success:
        return dispatch_failed(result, 'Fitness plan creation failed')

    data = result.data or {}
    plan = get_storage().create_fitness_plan(FitnessPlan(
        goals=body.goals,
        user_id=body.user_id,
        fitness_level=derive_fitness_level(body.user_profile),
        workout_plan=_first(data, 'workoutPlan', 'personalizedPlan'),
        nutrition_plan=_first(data, 'nutritionPlan', 'nutritionSync'),
        progress_tracking=_first(data, 'progressTracking', 'progressMetrics'),
    ))
    return jsonify(plan.to_dict())
