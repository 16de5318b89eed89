from __future__ import annotations

from flask import Blueprint, jsonify

from ..schemas import NutritionAnalysisRequest, parse_body
from ..storage import NutritionAnalysis
from . import dispatch_failed, fails_with, get_brain, get_storage, user_id_arg

bp = Blueprint('nutrition', __name__)


@bp.route('', methods=['GET'])
@fails_with('Failed to fetch nutrition analyses')
def list_analyses():
    return jsonify([a.to_dict() for a in get_storage().get_nutrition_analyses(user_id_arg())])


@bp.route('', methods=['POST'])
@fails_with('Failed to create nutrition analysis')
def create_analysis():
    """Body: { foodItems, healthGoals?, restrictions?, mealType?, userId? }"""
    body = parse_body(NutritionAnalysisRequest)
    goals = {
        'healthGoals': body.health_goals,
        'restrictions': body.restrictions,
        'mealType': body.meal_type,
    }
    result = get_brain().analyze_nutrition(body.food_items, goals, user_id=body.user_id)
    if not result.success:
        return dispatch_failed(result, 'Nutrition analysis failed')

    data = result.data or {}
    analysis = get_storage().create_nutrition_analysis(NutritionAnalysis(
        food_items=body.food_items,
        nutritional_breakdown=data.get('nutritionalBreakdown') or {},
        recommendations=data.get('recommendations') or {},
        user_id=body.user_id,
        health_goals=body.health_goals,
        restrictions=body.restrictions,
    ))
    return jsonify(analysis.to_dict())
