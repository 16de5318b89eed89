"""Request payload models.

Bodies arrive in camelCase (the web client's convention); the models expose
snake_case attributes and accept either spelling. ``parse_body`` converts
pydantic failures into ``ValidationError`` with ``{path, message, code}``
details, which the app renders as a 400.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Type, TypeVar, Union

from flask import request
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from . import geo
from .errors import InvalidCoordinate, ValidationError

M = TypeVar('M', bound=BaseModel)

Coordinate = Union[float, str]


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


# --- Clinics ---
class ClinicSearchRequest(RequestModel):
    location: Optional[str] = None
    latitude: Optional[Coordinate] = None
    longitude: Optional[Coordinate] = None
    radius: float = Field(default=10, ge=0)
    type: Optional[str] = None
    query: Optional[str] = None


class NearbySearchRequest(RequestModel):
    latitude: Coordinate
    longitude: Coordinate
    # metres, as the Places API takes it
    radius: float = Field(default=10000, gt=0, le=50000)
    type: str = 'hospital'


class ClinicCreate(RequestModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    latitude: Coordinate
    longitude: Coordinate
    type: str = Field(..., min_length=1)
    rating: Optional[int] = Field(default=None, ge=0, le=5)
    hours: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None

    @field_validator('latitude', 'longitude')
    @classmethod
    def _coordinate_in_range(cls, value: Any, info) -> str:
        try:
            return str(geo.parse_coordinate(value, kind=info.field_name))
        except InvalidCoordinate as exc:
            raise ValueError(str(exc))


class DirectionsRequest(RequestModel):
    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    mode: Literal['driving', 'walking', 'bicycling', 'transit'] = 'driving'


# --- Health logs ---
class HealthLogCreate(RequestModel):
    type: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    severity: Optional[int] = Field(default=None, ge=1, le=10)
    metadata: Optional[Dict[str, Any]] = None
    user_id: Optional[str] = None


# --- Symptoms ---
class SymptomAnalyzeRequest(RequestModel):
    symptoms: str = Field(..., min_length=10)
    age: Optional[int] = Field(default=None, ge=0, le=150)
    gender: Optional[str] = None
    duration: Optional[str] = None
    history: Optional[str] = None
    user_id: Optional[str] = None


# --- Chat ---
class ChatMessageIn(RequestModel):
    role: Literal['user', 'assistant', 'system']
    content: str
    id: Optional[str] = None
    timestamp: Optional[str] = None


class ChatMessageRequest(RequestModel):
    session_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    messages: List[ChatMessageIn] = Field(default_factory=list)


class ChatSessionCreate(RequestModel):
    user_id: Optional[str] = None
    messages: List[ChatMessageIn] = Field(default_factory=list)


# --- Nutrition / mental health / fitness ---
class NutritionAnalysisRequest(RequestModel):
    food_items: Union[str, List[Any]]
    health_goals: Optional[str] = None
    restrictions: Optional[str] = None
    meal_type: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator('food_items')
    @classmethod
    def _not_empty(cls, value: Any) -> Any:
        if not value:
            raise ValueError('foodItems must not be empty')
        return value


class MentalHealthAssessmentRequest(RequestModel):
    assessment_type: str = Field(..., min_length=1)
    responses: Union[Dict[str, Any], List[Any]]
    user_id: Optional[str] = None


class FitnessPlanRequest(RequestModel):
    goals: Union[str, List[Any], Dict[str, Any]]
    user_profile: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None


# --- Direct AI operations ---
class PredictionRequest(RequestModel):
    data: Any
    region: Optional[str] = None
    user_id: Optional[str] = None


class EducationRequest(RequestModel):
    query: str = Field(..., min_length=1)
    level: Literal['beginner', 'intermediate', 'advanced'] = 'intermediate'
    user_id: Optional[str] = None


class EmotionRequest(RequestModel):
    data: Any
    type: Literal['text', 'voice', 'facial'] = 'text'
    user_id: Optional[str] = None


def validation_details(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {'path': list(err.get('loc') or ()), 'message': err.get('msg', ''), 'code': err.get('type', '')}
        for err in exc.errors()
    ]


def parse_body(model: Type[M], data: Any = None) -> M:
    """Validate ``data`` (default: the request's JSON body) against ``model``."""
    if data is None:
        data = request.get_json(silent=True)
        if data is None:
            data = {}
    if not isinstance(data, dict):
        raise ValidationError(details=[{'path': [], 'message': 'Expected a JSON object', 'code': 'type_error'}])
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(details=validation_details(exc))
