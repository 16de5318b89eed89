from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from ..errors import NoProviderAvailable
from ..storage import AiInteraction
from .contracts import DispatchRequest, DispatchResponse, HealthProvider, RequestKind
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

UNKNOWN = 'unknown'


class AIBrain:
    """Routes typed AI requests to the best active provider.

    Selection is static: the highest priority active provider handles the
    request, once. A provider error becomes a ``success=False`` envelope; the
    request is neither retried nor handed to another provider, whatever its
    ``fallback`` flag says.
    """

    def __init__(self, registry: ProviderRegistry, *, storage=None):
        self.registry = registry
        self.storage = storage

    def select_provider(self, kind: RequestKind, specialization: str = 'general') -> HealthProvider:
        # kind/specialization are accepted so routing rules can be added per request type.
        return self.registry.select()

    def _invoke(self, provider: HealthProvider, request: DispatchRequest) -> Any:
        payload = request.input or {}
        kind = RequestKind(request.kind)
        if kind is RequestKind.CHAT:
            return provider.chat(payload.get('messages') or [], payload.get('options'))
        if kind is RequestKind.ANALYSIS:
            return provider.analyze(payload, request.specialization)
        if kind is RequestKind.PREDICTION:
            return provider.predict(payload)
        if kind is RequestKind.EDUCATION:
            return provider.educate(payload.get('query') or '', payload.get('options'))
        if kind is RequestKind.EMOTION:
            return provider.process_emotion(payload.get('data'), payload.get('type') or 'text')
        raise ValueError(f'Unsupported request type: {request.kind}')

    def dispatch(self, request: DispatchRequest) -> DispatchResponse:
        started = time.perf_counter()
        provider: Optional[HealthProvider] = None
        try:
            provider = self.select_provider(request.kind, request.specialization)
            data = self._invoke(provider, request)
            response = DispatchResponse(
                success=True,
                provider=provider.name,
                model=getattr(provider, 'model', UNKNOWN) or UNKNOWN,
                response_time=_elapsed_ms(started),
                data=data,
            )
        except NoProviderAvailable as exc:
            response = DispatchResponse(False, UNKNOWN, UNKNOWN, _elapsed_ms(started), error=str(exc))
        except Exception as exc:
            response = DispatchResponse(
                success=False,
                provider=provider.name if provider is not None else UNKNOWN,
                model=(getattr(provider, 'model', None) or UNKNOWN) if provider is not None else UNKNOWN,
                response_time=_elapsed_ms(started),
                error=str(exc) or type(exc).__name__,
            )
        logger.info(
            'AI dispatch kind=%s specialization=%s provider=%s success=%s latency_ms=%d',
            getattr(request.kind, 'value', request.kind), request.specialization,
            response.provider, response.success, response.response_time,
        )
        if not response.success:
            logger.warning('AI dispatch failed: %s', response.error)
        self._record(request, response)
        return response

    def _record(self, request: DispatchRequest, response: DispatchResponse) -> None:
        if self.storage is None:
            return
        try:
            self.storage.record_ai_interaction(AiInteraction(
                request_type=getattr(request.kind, 'value', str(request.kind)),
                specialization=request.specialization,
                provider=response.provider,
                model=response.model,
                success=response.success,
                user_id=request.user_id,
                input=request.input,
                output=response.data if response.success else {'error': response.error},
                response_time=response.response_time,
            ))
        except Exception:
            logger.exception('Failed to record AI interaction')

    # --- Convenience operations ---
    def analyze_symptoms(self, symptoms: str, patient_info: Optional[Dict[str, Any]] = None,
                         user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.ANALYSIS, specialization='symptoms',
            input={'symptoms': symptoms, 'patientInfo': patient_info or {}}, user_id=user_id, priority=1,
        ))

    def analyze_nutrition(self, food_data: Any, goals: Any = None, user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.ANALYSIS, specialization='nutrition',
            input={'foodData': food_data, 'goals': goals}, user_id=user_id, priority=2,
        ))

    def assess_mental_health(self, assessment_type: str, responses: Any,
                             user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.ANALYSIS, specialization='mental_health',
            input={'assessmentType': assessment_type, 'responses': responses}, user_id=user_id, priority=1,
        ))

    def create_fitness_plan(self, user_profile: Any, goals: Any, user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.ANALYSIS, specialization='fitness',
            input={'userProfile': user_profile, 'goals': goals}, user_id=user_id, priority=2,
        ))

    def analyze_health_trends(self, logs: List[Dict[str, Any]], user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.ANALYSIS, specialization='health_trends',
            input={'logs': logs}, user_id=user_id, priority=3,
        ))

    def predict_disease_trends(self, data: Any, region: Optional[str] = None,
                               user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.PREDICTION, specialization='epidemiology',
            input={'data': data, 'region': region}, user_id=user_id, priority=3,
        ))

    def analyze_emotions(self, data: Any, input_type: str = 'text', user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.EMOTION, specialization='emotional_intelligence',
            input={'data': data, 'type': input_type}, user_id=user_id, priority=2,
        ))

    def educational_query(self, query: str, level: str = 'intermediate',
                          user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.EDUCATION, specialization='medical_education',
            input={'query': query, 'options': {'level': level}}, user_id=user_id, priority=3,
        ))

    def chat(self, messages: List[Dict[str, Any]], options: Optional[Dict[str, Any]] = None,
             user_id: Optional[str] = None) -> DispatchResponse:
        return self.dispatch(DispatchRequest(
            kind=RequestKind.CHAT, specialization='general',
            input={'messages': messages, 'options': options or {}}, user_id=user_id, priority=1,
        ))

    def status(self) -> Dict[str, Any]:
        try:
            active: Optional[str] = self.registry.select().name
        except NoProviderAvailable:
            active = None
        return {
            'providers': [d.to_dict() for d in self.registry.descriptors()],
            'selected': active,
            'unavailable': dict(self.registry.unavailable),
        }


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))
