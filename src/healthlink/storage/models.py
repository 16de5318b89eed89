from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

R = TypeVar('R', bound='Record')


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def new_id() -> str:
    return str(uuid.uuid4())


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


class Record:
    """Dataclass mixin giving camelCase JSON (the client contract) both ways."""

    def to_dict(self) -> Dict[str, Any]:
        return {_camel(f.name): getattr(self, f.name) for f in fields(self)}  # type: ignore[arg-type]

    @classmethod
    def from_dict(cls: Type[R], data: Mapping[str, Any]) -> R:
        kwargs = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = _camel(f.name)
            if key in data:
                kwargs[f.name] = data[key]
            elif f.name in data:
                kwargs[f.name] = data[f.name]
        return cls(**kwargs)


@dataclass
class Clinic(Record):
    name: str
    address: str
    # Decimal degrees kept as text; parsed (and validated) on read by healthlink.geo.
    latitude: str
    longitude: str
    type: str
    id: str = field(default_factory=new_id)
    rating: Optional[int] = None
    hours: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


@dataclass
class HealthLog(Record):
    type: str
    date: str
    description: str
    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    severity: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: str = field(default_factory=utcnow_iso)


@dataclass
class ChatSession(Record):
    messages: List[Dict[str, Any]] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    created_at: str = field(default_factory=utcnow_iso)
    updated_at: str = field(default_factory=utcnow_iso)


@dataclass
class SymptomAnalysis(Record):
    symptoms: str
    analysis: Dict[str, Any]
    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    duration: Optional[str] = None
    created_at: str = field(default_factory=utcnow_iso)


@dataclass
class NutritionAnalysis(Record):
    food_items: Any
    nutritional_breakdown: Dict[str, Any] = field(default_factory=dict)
    recommendations: Any = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    health_goals: Optional[str] = None
    restrictions: Optional[str] = None
    created_at: str = field(default_factory=utcnow_iso)


@dataclass
class MentalHealthAssessment(Record):
    assessment_type: str
    responses: Any
    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    score: int = 0
    risk_level: str = 'low'
    recommendations: Any = field(default_factory=dict)
    follow_up_date: Optional[str] = None
    created_at: str = field(default_factory=utcnow_iso)


@dataclass
class FitnessPlan(Record):
    goals: Any
    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    fitness_level: str = 'beginner'
    workout_plan: Any = field(default_factory=dict)
    nutrition_plan: Any = field(default_factory=dict)
    progress_tracking: Any = field(default_factory=dict)
    is_active: int = 1
    created_at: str = field(default_factory=utcnow_iso)
    updated_at: str = field(default_factory=utcnow_iso)


@dataclass
class AiInteraction(Record):
    request_type: str
    specialization: str
    provider: str
    model: str
    success: bool
    id: str = field(default_factory=new_id)
    user_id: Optional[str] = None
    input: Any = None
    output: Any = None
    response_time: int = 0
    created_at: str = field(default_factory=utcnow_iso)


SAMPLE_CLINICS = [
    {
        'name': 'City Medical Center',
        'address': '123 Main Street, Downtown',
        'latitude': '40.7128',
        'longitude': '-74.0060',
        'type': 'general',
        'rating': 4,
        'hours': '8 AM - 8 PM',
        'phone': '(555) 123-4567',
        'website': 'https://citymedical.com',
    },
    {
        'name': 'QuickCare Urgent Care',
        'address': '456 Oak Avenue, Midtown',
        'latitude': '40.7589',
        'longitude': '-73.9851',
        'type': 'urgent',
        'rating': 5,
        'hours': '24/7',
        'phone': '(555) 987-6543',
        'website': 'https://quickcare.com',
    },
    {
        'name': 'Family Health Partners',
        'address': '789 Pine Street, Westside',
        'latitude': '40.7505',
        'longitude': '-73.9934',
        'type': 'general',
        'rating': 4,
        'hours': '9 AM - 5 PM',
        'phone': '(555) 456-7890',
        'website': 'https://familyhealth.com',
    },
]
