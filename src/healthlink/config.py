"""Environment-driven settings for the HealthLink API.

Values come from the process environment (optionally populated from a
``.env`` file by the app factory). Every outbound integration gets its own
block so timeouts and priorities can be tuned per vendor.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _truthy(value: Optional[str], default: str = '0') -> bool:
    s = value if value is not None else default
    return str(s).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_bool(name: str, default: bool = False) -> bool:
    return _truthy(os.getenv(name), '1' if default else '0')


def _env_int(name: str, default: int) -> int:
    value = _env_str(name)
    if value is None:
        return default
    try:
        return int(float(value))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = _env_str(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if parsed != parsed:  # NaN
        return default
    return parsed


@dataclass
class ProviderSettings:
    name: str
    api_key: Optional[str] = None
    model: Optional[str] = None
    priority: int = 1
    rate_limit: int = 100
    timeout_s: float = 60.0
    enabled: bool = True
    base_url: Optional[str] = None
    # Vendor specific extras (Azure endpoint, API version, ...)
    extra: Dict[str, str] = field(default_factory=dict)

    @property
    def configured(self) -> bool:
        return bool(self.enabled and self.api_key)


# name -> (default model, priority, rate limit)
_PROVIDER_DEFAULTS = {
    'openai': ('gpt-4o-mini', 10, 100),
    'gemini': ('gemini-2.5-flash', 9, 60),
    'perplexity': ('sonar', 8, 50),
}


def _provider_from_env(name: str) -> ProviderSettings:
    prefix = name.upper()
    model, priority, rate_limit = _PROVIDER_DEFAULTS.get(name, (None, 1, 100))
    settings = ProviderSettings(
        name=name,
        api_key=_env_str(f'{prefix}_API_KEY'),
        model=_env_str(f'{prefix}_MODEL', model),
        priority=_env_int(f'{prefix}_PRIORITY', priority),
        rate_limit=_env_int(f'{prefix}_RATE_LIMIT', rate_limit),
        timeout_s=_env_float(f'{prefix}_TIMEOUT_S', 60.0),
        enabled=_env_bool(f'{prefix}_ENABLED', True),
        base_url=_env_str(f'{prefix}_BASE_URL'),
    )
    if name == 'openai':
        azure_key = _env_str('AZURE_OPENAI_API_KEY')
        if azure_key and not settings.api_key:
            settings.api_key = azure_key
            settings.extra = {
                'azure_endpoint': _env_str('AZURE_OPENAI_ENDPOINT') or _env_str('AZURE_ENDPOINT') or '',
                'api_version': _env_str('AZURE_API_VERSION', '2024-02-15-preview') or '',
                'deployment': _env_str('AZURE_DEPLOYMENT_NAME') or '',
            }
    return settings


@dataclass
class MapsSettings:
    api_key: Optional[str] = None
    base_url: str = 'https://maps.googleapis.com/maps/api'
    timeout_s: float = 15.0
    max_retries: int = 3
    backoff_s: float = 0.5

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class StorageSettings:
    backend: str = 'memory'
    use_fakeredis: bool = True
    redis_host: str = '127.0.0.1'
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    redis_ssl: bool = False
    key_prefix: str = 'healthlink'
    seed_clinics: bool = True

    @property
    def shared_across_processes(self) -> bool:
        """Only a real Redis server is visible to every worker process."""
        return self.backend == 'redis' and not self.use_fakeredis


@dataclass
class Settings:
    secret_key: str = 'dev-secret'
    log_level: str = 'INFO'
    provider_names: List[str] = field(default_factory=lambda: ['openai', 'gemini', 'perplexity'])
    strict_providers: bool = False
    dev_provider: bool = False
    providers: Dict[str, ProviderSettings] = field(default_factory=dict)
    maps: MapsSettings = field(default_factory=MapsSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)

    def provider(self, name: str) -> ProviderSettings:
        if name not in self.providers:
            self.providers[name] = ProviderSettings(name=name)
        return self.providers[name]

    @classmethod
    def from_env(cls) -> 'Settings':
        names_raw = _env_str('HEALTHLINK_PROVIDERS', 'openai,gemini,perplexity') or ''
        names = [n.strip().lower() for n in names_raw.split(',') if n.strip()]
        return cls(
            secret_key=_env_str('FLASK_SECRET_KEY', 'dev-secret') or 'dev-secret',
            log_level=(_env_str('LOG_LEVEL', 'INFO') or 'INFO').upper(),
            provider_names=names,
            strict_providers=_env_bool('HEALTHLINK_STRICT_PROVIDERS', False),
            dev_provider=_env_bool('HEALTHLINK_DEV_PROVIDER', False),
            providers={n: _provider_from_env(n) for n in names},
            maps=MapsSettings(
                api_key=_env_str('GOOGLE_MAPS_API_KEY') or _env_str('MAPS_API_KEY'),
                base_url=_env_str('MAPS_BASE_URL', 'https://maps.googleapis.com/maps/api') or '',
                timeout_s=_env_float('MAPS_TIMEOUT_S', 15.0),
                max_retries=max(0, min(_env_int('MAPS_MAX_RETRIES', 3), 6)),
                backoff_s=max(0.0, _env_float('MAPS_BACKOFF_S', 0.5)),
            ),
            storage=StorageSettings(
                backend=(_env_str('HEALTHLINK_STORAGE', 'memory') or 'memory').lower(),
                use_fakeredis=_env_bool('USE_FAKEREDIS', True),
                redis_host=_env_str('REDIS_HOST', '127.0.0.1') or '127.0.0.1',
                redis_port=_env_int('REDIS_PORT', 6379),
                redis_db=_env_int('REDIS_DB', 0),
                redis_password=_env_str('REDIS_PASSWORD'),
                redis_ssl=_env_bool('REDIS_SSL', False),
                key_prefix=_env_str('REDIS_KEY_PREFIX', 'healthlink') or 'healthlink',
                seed_clinics=_env_bool('HEALTHLINK_SEED_CLINICS', True),
            ),
        )
