from __future__ import annotations

import logging

from ..config import StorageSettings
from .base import RecordStorage, Storage
from .memory import MemStorage
from .models import (
    AiInteraction,
    ChatSession,
    Clinic,
    FitnessPlan,
    HealthLog,
    MentalHealthAssessment,
    NutritionAnalysis,
    SymptomAnalysis,
)
from .redis_store import RedisStorage, connect_redis

logger = logging.getLogger(__name__)

__all__ = [
    'AiInteraction',
    'ChatSession',
    'Clinic',
    'FitnessPlan',
    'HealthLog',
    'MemStorage',
    'MentalHealthAssessment',
    'NutritionAnalysis',
    'RecordStorage',
    'RedisStorage',
    'Storage',
    'SymptomAnalysis',
    'build_storage',
]


def build_storage(settings: StorageSettings) -> RecordStorage:
    if settings.backend == 'redis':
        client = connect_redis(settings)
        logger.info('Using Redis storage (fakeredis=%s)', settings.use_fakeredis)
        return RedisStorage(client, key_prefix=settings.key_prefix, seed_clinics=settings.seed_clinics)
    if settings.backend != 'memory':
        logger.warning('Unknown HEALTHLINK_STORAGE=%r; using in-memory storage', settings.backend)
    return MemStorage(seed_clinics=settings.seed_clinics)
