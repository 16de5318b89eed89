from __future__ import annotations

import importlib
import logging
from typing import Dict, Iterable, List, Optional

from ..config import Settings
from ..errors import NoProviderAvailable, ProviderConfigurationError
from .contracts import REQUIRED_PROVIDER_ATTRS, REQUIRED_PROVIDER_METHODS, HealthProvider, ProviderDescriptor

logger = logging.getLogger(__name__)

PROVIDERS_PACKAGE = 'healthlink.brain.providers'


class ProviderRegistry:
    """Ordered registry of provider adapters.

    Providers are kept in registration order; selection relies on it to break
    priority ties (first registered wins). Providers whose module cannot be
    imported or constructed are recorded in ``unavailable`` instead of being
    dropped silently.
    """

    def __init__(self):
        self._providers: Dict[str, HealthProvider] = {}
        self.unavailable: Dict[str, str] = {}

    def register(self, provider: HealthProvider) -> None:
        name = getattr(provider, 'name', None)
        missing = [a for a in REQUIRED_PROVIDER_ATTRS if not hasattr(provider, a)]
        missing += [m for m in REQUIRED_PROVIDER_METHODS if not callable(getattr(provider, m, None))]
        if not name or missing:
            label = name or type(provider).__name__
            raise ProviderConfigurationError(
                f"Provider '{label}' does not implement: {', '.join(missing) or 'name'}",
                {label: 'incomplete provider contract'},
            )
        if name in self._providers:
            raise ProviderConfigurationError(f"Provider '{name}' is already registered", {name: 'duplicate'})
        self._providers[name] = provider
        self.unavailable.pop(name, None)
        logger.info('Registered AI provider %s (priority=%s active=%s)', name, provider.priority, provider.is_active)

    def discover(self, names: Iterable[str], settings: Settings, package: str = PROVIDERS_PACKAGE) -> Dict[str, str]:
        """Import ``<package>.<name>_provider`` for each name and register ``create_provider(...)``.

        Returns the name -> reason map of providers that could not be loaded.
        """
        for name in names:
            module_name = f'{package}.{name}_provider'
            try:
                module = importlib.import_module(module_name)
            except Exception as exc:
                self._mark_unavailable(name, f'import failed: {exc}')
                continue
            factory = getattr(module, 'create_provider', None)
            if factory is None:
                self._mark_unavailable(name, f'{module_name} has no create_provider()')
                continue
            try:
                self.register(factory(settings.provider(name)))
            except ProviderConfigurationError as exc:
                self._mark_unavailable(name, str(exc))
            except Exception as exc:
                self._mark_unavailable(name, f'construction failed: {exc}')
        return dict(self.unavailable)

    def _mark_unavailable(self, name: str, reason: str) -> None:
        self.unavailable[name] = reason
        logger.warning('AI provider %s unavailable: %s', name, reason)

    def get(self, name: str) -> Optional[HealthProvider]:
        return self._providers.get(name)

    @property
    def providers(self) -> List[HealthProvider]:
        return list(self._providers.values())

    def descriptors(self) -> List[ProviderDescriptor]:
        return [ProviderDescriptor.of(p) for p in self._providers.values()]

    def select(self) -> HealthProvider:
        best: Optional[HealthProvider] = None
        for provider in self._providers.values():
            if not provider.is_active:
                continue
            # Strict comparison keeps the earliest registration on ties.
            if best is None or provider.priority > best.priority:
                best = provider
        if best is None:
            raise NoProviderAvailable()
        return best

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers
