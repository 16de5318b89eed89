from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol


class RequestKind(str, Enum):
    CHAT = 'chat'
    ANALYSIS = 'analysis'
    PREDICTION = 'prediction'
    EDUCATION = 'education'
    EMOTION = 'emotion'


class HealthProvider(Protocol):
    """Provider contract for the AI brain.

    Required attributes:
      - name: str (unique registry id)
      - is_active: bool
      - priority: int (higher wins)
      - rate_limit: int (requests/minute, advisory)
      - model: str (default model identifier, echoed in responses)
    Required methods, one per request kind:
      - chat(messages, options) -> str
      - analyze(input, specialization, options) -> dict
      - predict(data, options) -> dict
      - educate(query, options) -> dict
      - process_emotion(data, input_type, options) -> dict
    """

    name: str
    is_active: bool
    priority: int
    rate_limit: int
    model: str

    def chat(self, messages: List[Dict[str, Any]], options: Optional[Dict[str, Any]] = None) -> str:
        ...

    def analyze(self, input: Dict[str, Any], specialization: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    def predict(self, data: Dict[str, Any], options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    def educate(self, query: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    def process_emotion(self, data: Any, input_type: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...


REQUIRED_PROVIDER_ATTRS = ('name', 'is_active', 'priority', 'rate_limit')
REQUIRED_PROVIDER_METHODS = ('chat', 'analyze', 'predict', 'educate', 'process_emotion')


@dataclass(frozen=True)
class ProviderDescriptor:
    name: str
    active: bool
    priority: int
    rate_limit: int

    @classmethod
    def of(cls, provider: HealthProvider) -> 'ProviderDescriptor':
        return cls(
            name=provider.name,
            active=bool(provider.is_active),
            priority=int(provider.priority),
            rate_limit=int(provider.rate_limit),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'active': self.active,
            'priority': self.priority,
            'rateLimit': self.rate_limit,
        }


@dataclass
class DispatchRequest:
    kind: RequestKind
    specialization: str
    input: Dict[str, Any] = field(default_factory=dict)
    user_id: Optional[str] = None
    priority: Optional[int] = None
    # Accepted for client compatibility; dispatch is always single-attempt.
    fallback: bool = False


@dataclass
class DispatchResponse:
    success: bool
    provider: str
    model: str
    response_time: int
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            'success': self.success,
            'provider': self.provider,
            'model': self.model,
            'responseTime': self.response_time,
        }
        if self.success:
            out['data'] = self.data
        else:
            out['error'] = self.error
        return out
