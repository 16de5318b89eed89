from __future__ import annotations

import logging

from ..config import Settings
from ..errors import ProviderConfigurationError
from .contracts import DispatchRequest, DispatchResponse, HealthProvider, ProviderDescriptor, RequestKind
from .dispatcher import AIBrain
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

__all__ = [
    'AIBrain',
    'DispatchRequest',
    'DispatchResponse',
    'HealthProvider',
    'ProviderDescriptor',
    'ProviderRegistry',
    'RequestKind',
    'build_brain',
]


def build_brain(settings: Settings, storage=None) -> AIBrain:
    """Discover the configured providers and wrap them in an ``AIBrain``.

    With ``strict_providers`` on, any provider that failed to load aborts
    startup with ``ProviderConfigurationError``.
    """
    registry = ProviderRegistry()
    names = list(settings.provider_names)
    if settings.dev_provider and 'dev' not in names:
        names.append('dev')
    unavailable = registry.discover(names, settings)
    if unavailable:
        logger.warning('Disabled AI capabilities: %s', ', '.join(sorted(unavailable)))
        if settings.strict_providers:
            raise ProviderConfigurationError(
                f"AI providers failed to load: {', '.join(sorted(unavailable))}", unavailable,
            )
    inactive = [p.name for p in registry.providers if not p.is_active]
    if inactive:
        logger.info('AI providers registered without credentials (inactive): %s', ', '.join(inactive))
    return AIBrain(registry, storage=storage)
