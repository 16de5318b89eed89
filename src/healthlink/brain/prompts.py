"""Prompt templates shared by the LLM providers.

Each builder returns a ``(system_prompt, user_prompt)`` pair. Providers may
prepend their own flavour to the system prompt but the JSON shapes requested
here are what the blueprints read back.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Tuple

Prompt = Tuple[str, str]

CHAT_SYSTEM_PROMPT = """You are HealthLink AI, a friendly and knowledgeable health assistant. Your role is to:

1. Provide general health information and guidance
2. Answer health-related questions with evidence-based information
3. Encourage users to seek professional medical care when appropriate
4. Be supportive and empathetic while maintaining professional boundaries
5. Never provide specific medical diagnoses or treatment recommendations
6. Always emphasize that you're not a replacement for professional medical advice

Guidelines:
- Be conversational but professional
- Ask follow-up questions to better understand the user's concerns
- Redirect to healthcare professionals for serious symptoms or medical decisions"""


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def _or_missing(value: Any) -> str:
    if value is None or value == '':
        return 'Not provided'
    return str(value)


def _symptoms(input: Dict[str, Any]) -> Prompt:
    info = input.get('patientInfo') or {}
    system = ('You are an advanced medical AI assistant specialized in symptom analysis. Analyze symptoms and '
              'provide structured medical insights following evidence-based medicine principles. Be cautious '
              'and conservative, and always recommend professional consultation for serious symptoms.')
    user = f"""Analyze the following symptoms and provide a comprehensive assessment:

Patient Information:
- Symptoms: {input.get('symptoms')}
- Age: {_or_missing(info.get('age'))}
- Gender: {_or_missing(info.get('gender'))}
- Duration: {_or_missing(info.get('duration'))}
- Medical History: {_or_missing(info.get('history'))}

Provide your analysis in JSON format with the following structure:
{{
  "condition": "Most likely condition name",
  "confidence": 85,
  "description": "Detailed medical explanation",
  "recommendations": ["Specific actionable recommendations"],
  "urgency": "low/medium/high",
  "differentialDiagnosis": ["Alternative conditions to consider"],
  "redFlags": ["Warning signs requiring immediate attention"],
  "followUp": "Recommended follow-up timeframe"
}}"""
    return system, user


def _nutrition(input: Dict[str, Any]) -> Prompt:
    system = 'You are a certified nutritionist AI specialized in personalized nutrition analysis and meal planning.'
    user = f"""Analyze the following nutritional data and provide comprehensive guidance:

Food Data: {_dump(input.get('foodData'))}
Health Goals: {_dump(input.get('goals'))}

Provide analysis in JSON format:
{{
  "nutritionalBreakdown": {{
    "calories": 0,
    "macronutrients": {{"protein": 0, "carbs": 0, "fats": 0}},
    "micronutrients": {{}},
    "deficiencies": []
  }},
  "recommendations": {{
    "mealPlan": [],
    "supplements": [],
    "lifestyle": []
  }},
  "healthImpact": "Assessment of current nutrition on health goals",
  "improvements": "Specific areas for improvement"
}}"""
    return system, user


def _mental_health(input: Dict[str, Any]) -> Prompt:
    system = ('You are a mental health AI specialist trained in evidence-based psychological assessment '
              'and intervention strategies.')
    user = f"""Assess the following mental health data:

Assessment Type: {input.get('assessmentType')}
Responses: {_dump(input.get('responses'))}

Provide assessment in JSON format:
{{
  "score": 0,
  "riskLevel": "low/medium/high",
  "primaryConcerns": [],
  "strengths": [],
  "recommendations": {{
    "immediate": [],
    "shortTerm": [],
    "longTerm": [],
    "professionalSupport": "When to seek professional help"
  }},
  "copingStrategies": [],
  "followUpDate": "ISO date for the next check-in, or null",
  "monitoringPlan": "How to track progress"
}}"""
    return system, user


def _fitness(input: Dict[str, Any]) -> Prompt:
    system = 'You are an expert fitness and exercise physiologist AI creating personalized fitness programs.'
    user = f"""Create a comprehensive fitness plan:

User Profile: {_dump(input.get('userProfile'))}
Goals: {_dump(input.get('goals'))}

Provide plan in JSON format:
{{
  "fitnessLevel": "beginner/intermediate/advanced",
  "workoutPlan": {{
    "schedule": {{}},
    "exercises": [],
    "progression": {{}}
  }},
  "nutritionPlan": {{}},
  "progressTracking": {{}},
  "recoveryPlan": {{}},
  "safetyConsiderations": []
}}"""
    return system, user


def _health_trends(input: Dict[str, Any]) -> Prompt:
    system = ('You are a health data analyst providing insights on personal health trends. Be positive, '
              'encouraging, and provide actionable suggestions.')
    user = f"""Analyze the following health log data and provide insights about patterns and trends:

{json.dumps(input.get('logs') or [], indent=2, ensure_ascii=False, default=str)}

Provide the analysis in JSON format:
{{
  "summary": "Brief conversational overview",
  "patterns": [],
  "correlations": [],
  "suggestions": [],
  "areasOfAttention": []
}}"""
    return system, user


ANALYSIS_PROMPTS: Dict[str, Callable[[Dict[str, Any]], Prompt]] = {
    'symptoms': _symptoms,
    'nutrition': _nutrition,
    'mental_health': _mental_health,
    'fitness': _fitness,
    'health_trends': _health_trends,
}


def analysis_prompt(specialization: str, input: Dict[str, Any]) -> Prompt:
    builder = ANALYSIS_PROMPTS.get(specialization)
    if builder is None:
        raise ValueError(f'Unsupported analysis type: {specialization}')
    return builder(input or {})


def prediction_prompt(data: Dict[str, Any]) -> Prompt:
    system = ('You are an advanced predictive analytics AI specialized in healthcare epidemiology '
              'and disease pattern analysis.')
    user = f"""Analyze the following data for disease prediction and trends:

Data: {_dump(data.get('data', data))}
Region: {data.get('region') or 'Global'}

Provide prediction in JSON format:
{{
  "predictions": [
    {{
      "diseaseType": "Disease name",
      "probability": 0.75,
      "timeframe": "3-6 months",
      "riskFactors": [],
      "affectedDemographics": [],
      "preventiveMeasures": []
    }}
  ],
  "trendAnalysis": {{"currentTrends": [], "emergingPatterns": [], "seasonalFactors": []}},
  "recommendations": {{"publicHealth": [], "individual": [], "healthcare": []}},
  "confidence": "High/Medium/Low",
  "dataQuality": "Assessment of input data reliability"
}}"""
    return system, user


def education_prompt(query: str, level: str = 'intermediate') -> Prompt:
    system = ('You are an expert medical educator AI creating comprehensive, accurate, and engaging '
              'health education content.')
    user = f"""Create educational content for the following query:

Query: {query}
Education Level: {level}

Provide educational content in JSON format:
{{
  "title": "Clear, descriptive title",
  "overview": "Brief overview of the topic",
  "keyPoints": [{{"point": "Main concept", "explanation": "Detailed explanation", "examples": []}}],
  "practicalApplications": [],
  "commonMisconceptions": [],
  "furtherReading": [],
  "quiz": {{"questions": [{{"question": "Question text", "options": ["A", "B", "C", "D"], "correct": 0, "explanation": "Why this is correct"}}]}},
  "difficulty": "{level}",
  "estimatedReadTime": 5
}}"""
    return system, user


_EMOTION_LEADS = {
    'text': 'Analyze the emotional content of this text: "{data}"',
    'voice': 'Analyze the emotional patterns in this voice data: {data}',
    'facial': 'Analyze the emotional expressions in this facial data: {data}',
}


def emotion_prompt(data: Any, input_type: str) -> Prompt:
    system = ('You are an expert emotion AI specialized in detecting, analyzing, and providing therapeutic '
              'guidance for emotional states.')
    rendered = data if input_type == 'text' and isinstance(data, str) else _dump(data)
    lead = _EMOTION_LEADS.get(input_type, 'Analyze the emotional state from this data: {data}').format(data=rendered)
    user = f"""{lead}

Provide emotion analysis in JSON format:
{{
  "primaryEmotions": [{{"emotion": "emotion name", "intensity": 0.85, "confidence": 0.92}}],
  "overallMood": "positive/negative/neutral",
  "stressLevel": 7,
  "emotionalState": {{"valence": "positive/negative", "arousal": "high/medium/low", "dominance": "controlled/uncontrolled"}},
  "insights": {{"triggers": [], "patterns": [], "concerns": []}},
  "recommendations": {{"immediate": [], "coping": [], "professional": "When to seek help"}},
  "monitoring": {{"trackMetrics": [], "checkInFrequency": "Daily/Weekly"}}
}}"""
    return system, user
