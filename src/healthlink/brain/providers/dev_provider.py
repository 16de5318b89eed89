from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from ...config import ProviderSettings
from .base import Completion, LLMProvider

# Canned structured answers, keyed by the first word of the system prompt's topic.
_CANNED: Dict[str, Dict[str, Any]] = {
    'symptom': {
        'condition': 'Unspecified (offline development reply)',
        'confidence': 50,
        'description': 'The dev provider does not analyse symptoms. Configure an AI provider key for real output.',
        'recommendations': ['Consult a healthcare professional'],
        'urgency': 'medium',
        'differentialDiagnosis': [],
        'redFlags': [],
        'followUp': 'As needed',
    },
    'nutritionist': {
        'nutritionalBreakdown': {'calories': 0, 'macronutrients': {'protein': 0, 'carbs': 0, 'fats': 0},
                                 'micronutrients': {}, 'deficiencies': []},
        'recommendations': {'mealPlan': [], 'supplements': [], 'lifestyle': []},
        'healthImpact': 'Not analysed (dev provider)',
        'improvements': '',
    },
    'mental': {
        'score': 0,
        'riskLevel': 'low',
        'primaryConcerns': [],
        'strengths': [],
        'recommendations': {'immediate': [], 'shortTerm': [], 'longTerm': [], 'professionalSupport': ''},
        'copingStrategies': [],
        'followUpDate': None,
        'monitoringPlan': '',
    },
    'fitness': {
        'fitnessLevel': 'beginner',
        'workoutPlan': {'schedule': {}, 'exercises': [], 'progression': {}},
        'nutritionPlan': {},
        'progressTracking': {},
        'recoveryPlan': {},
        'safetyConsiderations': [],
    },
}


class DevEchoProvider(LLMProvider):
    """Offline provider for local development.

    Always active at priority 0, so any configured vendor outranks it. Chat
    echoes the last user message; structured calls return fixed shapes.
    """

    vendor = 'Dev'
    default_model = 'dev-echo'

    def __init__(self, settings: ProviderSettings):
        super().__init__(settings)
        self.is_active = True

    def _complete(self, messages: List[Dict[str, str]], *, temperature: float, max_tokens: Optional[int],
                  json_mode: bool, model: Optional[str] = None) -> Completion:
        if not json_mode:
            last = next((m['content'] for m in reversed(messages) if m['role'] == 'user'), '')
            return Completion(text=f'(dev) You said: {last}')
        system = next((m['content'] for m in messages if m['role'] == 'system'), '').lower()
        for marker, payload in _CANNED.items():
            if marker in system:
                return Completion(text=json.dumps(payload))
        return Completion(text=json.dumps({'summary': 'Offline development reply', 'items': []}))


def create_provider(settings: ProviderSettings) -> DevEchoProvider:
    settings.priority = 0
    settings.model = settings.model or DevEchoProvider.default_model
    return DevEchoProvider(settings)
