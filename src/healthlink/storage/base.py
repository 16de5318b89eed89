from __future__ import annotations

import contextlib
from datetime import datetime, timezone
from typing import Any, ContextManager, Dict, Iterable, List, Optional, Protocol, Type, TypeVar

from .. import geo
from .models import (
    SAMPLE_CLINICS,
    AiInteraction,
    ChatSession,
    Clinic,
    FitnessPlan,
    HealthLog,
    MentalHealthAssessment,
    NutritionAnalysis,
    Record,
    SymptomAnalysis,
    utcnow_iso,
)

R = TypeVar('R', bound=Record)


class Storage(Protocol):
    """Record store used by the blueprints."""

    # Clinics
    def get_clinics(self) -> List[Clinic]:
        ...

    def get_clinic(self, clinic_id: str) -> Optional[Clinic]:
        ...

    def create_clinic(self, clinic: Clinic) -> Clinic:
        ...

    def search_clinics(self, query: str, type_filter: Optional[str] = None) -> List[Clinic]:
        ...

    def get_clinics_by_location(self, latitude: float, longitude: float, radius: float) -> List[geo.ClinicSearchResult]:
        """Clinics within ``radius`` miles, nearest first."""
        ...

    # Health logs
    def get_health_logs(self, user_id: str, type_filter: Optional[str] = None) -> List[HealthLog]:
        ...

    def create_health_log(self, log: HealthLog) -> HealthLog:
        ...

    def delete_health_log(self, log_id: str) -> bool:
        ...

    # Chat
    def get_chat_session(self, session_id: str) -> Optional[ChatSession]:
        ...

    def get_chat_sessions(self, user_id: str) -> List[ChatSession]:
        ...

    def create_chat_session(self, session: ChatSession) -> ChatSession:
        ...

    def update_chat_session(self, session_id: str, messages: List[Dict[str, Any]]) -> Optional[ChatSession]:
        ...

    # Analyses
    def get_symptom_analyses(self, user_id: str) -> List[SymptomAnalysis]:
        ...

    def create_symptom_analysis(self, analysis: SymptomAnalysis) -> SymptomAnalysis:
        ...

    def get_nutrition_analyses(self, user_id: Optional[str] = None) -> List[NutritionAnalysis]:
        ...

    def create_nutrition_analysis(self, analysis: NutritionAnalysis) -> NutritionAnalysis:
        ...

    def get_mental_health_assessments(self, user_id: Optional[str] = None) -> List[MentalHealthAssessment]:
        ...

    def create_mental_health_assessment(self, assessment: MentalHealthAssessment) -> MentalHealthAssessment:
        ...

    def get_fitness_plans(self, user_id: Optional[str] = None) -> List[FitnessPlan]:
        ...

    def create_fitness_plan(self, plan: FitnessPlan) -> FitnessPlan:
        ...

    # AI interaction log
    def record_ai_interaction(self, interaction: AiInteraction) -> AiInteraction:
        ...

    def get_ai_interactions(self, user_id: Optional[str] = None) -> List[AiInteraction]:
        ...


def _date_key(value: Optional[str]) -> datetime:
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RecordStorage:
    """Implements the Storage operations over four collection primitives.

    Subclasses provide ``_put``, ``_get``, ``_values`` (insertion order) and
    ``_delete`` for a named collection. Read-modify-write updates run inside
    ``_locked(...)``; the default is a no-op, so a backend without its own
    lock is last-writer-wins.
    """

    def _locked(self, collection: str, record_id: str) -> ContextManager[Any]:
        return contextlib.nullcontext()

    def _put(self, collection: str, record: Record) -> None:
        raise NotImplementedError

    def _get(self, collection: str, record_id: str, cls: Type[R]) -> Optional[R]:
        raise NotImplementedError

    def _values(self, collection: str, cls: Type[R]) -> List[R]:
        raise NotImplementedError

    def _delete(self, collection: str, record_id: str) -> bool:
        raise NotImplementedError

    def seed_sample_clinics(self) -> None:
        if self._values('clinics', Clinic):
            return
        for data in SAMPLE_CLINICS:
            self.create_clinic(Clinic(**data))

    @staticmethod
    def _for_user(records: Iterable[R], user_id: Optional[str]) -> List[R]:
        if user_id is None:
            return list(records)
        return [r for r in records if getattr(r, 'user_id', None) == user_id]

    @staticmethod
    def _newest_first(records: Iterable[R], attr: str = 'created_at') -> List[R]:
        return sorted(records, key=lambda r: _date_key(getattr(r, attr, None)), reverse=True)

    # --- Clinics ---
    def get_clinics(self) -> List[Clinic]:
        return self._values('clinics', Clinic)

    def get_clinic(self, clinic_id: str) -> Optional[Clinic]:
        return self._get('clinics', clinic_id, Clinic)

    def create_clinic(self, clinic: Clinic) -> Clinic:
        self._put('clinics', clinic)
        return clinic

    def search_clinics(self, query: str, type_filter: Optional[str] = None) -> List[Clinic]:
        return geo.search_by_text(self.get_clinics(), query, type_filter)

    def get_clinics_by_location(self, latitude: float, longitude: float, radius: float) -> List[geo.ClinicSearchResult]:
        return geo.search_by_location(self.get_clinics(), latitude, longitude, radius)

    # --- Health logs ---
    def get_health_logs(self, user_id: str, type_filter: Optional[str] = None) -> List[HealthLog]:
        logs = self._for_user(self._values('health_logs', HealthLog), user_id)
        if type_filter:
            logs = [log for log in logs if log.type == type_filter]
        return self._newest_first(logs, 'date')

    def create_health_log(self, log: HealthLog) -> HealthLog:
        self._put('health_logs', log)
        return log

    def delete_health_log(self, log_id: str) -> bool:
        return self._delete('health_logs', log_id)

    # --- Chat sessions ---
    def get_chat_session(self, session_id: str) -> Optional[ChatSession]:
        return self._get('chat_sessions', session_id, ChatSession)

    def get_chat_sessions(self, user_id: str) -> List[ChatSession]:
        sessions = self._for_user(self._values('chat_sessions', ChatSession), user_id)
        return self._newest_first(sessions, 'updated_at')

    def create_chat_session(self, session: ChatSession) -> ChatSession:
        self._put('chat_sessions', session)
        return session

    def update_chat_session(self, session_id: str, messages: List[Dict[str, Any]]) -> Optional[ChatSession]:
        with self._locked('chat_sessions', session_id):
            session = self.get_chat_session(session_id)
            if session is None:
                return None
            session.messages = list(messages)
            session.updated_at = utcnow_iso()
            self._put('chat_sessions', session)
        return session

    # --- Symptom analyses ---
    def get_symptom_analyses(self, user_id: str) -> List[SymptomAnalysis]:
        return self._newest_first(self._for_user(self._values('symptom_analyses', SymptomAnalysis), user_id))

    def create_symptom_analysis(self, analysis: SymptomAnalysis) -> SymptomAnalysis:
        self._put('symptom_analyses', analysis)
        return analysis

    # --- Nutrition / mental health / fitness ---
    def get_nutrition_analyses(self, user_id: Optional[str] = None) -> List[NutritionAnalysis]:
        return self._newest_first(self._for_user(self._values('nutrition_analyses', NutritionAnalysis), user_id))

    def create_nutrition_analysis(self, analysis: NutritionAnalysis) -> NutritionAnalysis:
        self._put('nutrition_analyses', analysis)
        return analysis

    def get_mental_health_assessments(self, user_id: Optional[str] = None) -> List[MentalHealthAssessment]:
        records = self._values('mental_health_assessments', MentalHealthAssessment)
        return self._newest_first(self._for_user(records, user_id))

    def create_mental_health_assessment(self, assessment: MentalHealthAssessment) -> MentalHealthAssessment:
        self._put('mental_health_assessments', assessment)
        return assessment

    def get_fitness_plans(self, user_id: Optional[str] = None) -> List[FitnessPlan]:
        return self._newest_first(self._for_user(self._values('fitness_plans', FitnessPlan), user_id))

    def create_fitness_plan(self, plan: FitnessPlan) -> FitnessPlan:
        self._put('fitness_plans', plan)
        return plan

    # --- AI interactions ---
    def record_ai_interaction(self, interaction: AiInteraction) -> AiInteraction:
        self._put('ai_interactions', interaction)
        return interaction

    def get_ai_interactions(self, user_id: Optional[str] = None) -> List[AiInteraction]:
        return self._newest_first(self._for_user(self._values('ai_interactions', AiInteraction), user_id))
