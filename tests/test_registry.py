import types

import pytest

from healthlink.brain import ProviderRegistry, build_brain
from healthlink.config import ProviderSettings, Settings
from healthlink.errors import NoProviderAvailable, ProviderConfigurationError

from conftest import FakeProvider


def test_select_prefers_active_over_higher_inactive():
    registry = ProviderRegistry()
    registry.register(FakeProvider('a', priority=5, active=True))
    registry.register(FakeProvider('b', priority=9, active=False))
    assert registry.select().name == 'a'


def test_select_highest_priority_active():
    registry = ProviderRegistry()
    registry.register(FakeProvider('low', priority=1))
    registry.register(FakeProvider('high', priority=10))
    registry.register(FakeProvider('mid', priority=5))
    assert registry.select().name == 'high'


def test_select_tie_goes_to_first_registered():
    registry = ProviderRegistry()
    registry.register(FakeProvider('first', priority=7))
    registry.register(FakeProvider('second', priority=7))
    assert registry.select().name == 'first'


def test_select_raises_when_nothing_active():
    registry = ProviderRegistry()
    registry.register(FakeProvider('off', active=False))
    with pytest.raises(NoProviderAvailable):
        registry.select()
    with pytest.raises(NoProviderAvailable):
        ProviderRegistry().select()


def test_register_rejects_duplicates_and_incomplete_providers():
    registry = ProviderRegistry()
    registry.register(FakeProvider('dup'))
    with pytest.raises(ProviderConfigurationError) as exc:
        registry.register(FakeProvider('dup'))
    assert 'dup' in str(exc.value)

    incomplete = types.SimpleNamespace(name='half', is_active=True, priority=1, rate_limit=1)
    with pytest.raises(ProviderConfigurationError) as exc:
        registry.register(incomplete)
    assert 'half' in exc.value.unavailable


def test_descriptors_follow_registration_order():
    registry = ProviderRegistry()
    registry.register(FakeProvider('x', priority=2))
    registry.register(FakeProvider('y', priority=3, active=False))
    assert [d.to_dict() for d in registry.descriptors()] == [
        {'name': 'x', 'active': True, 'priority': 2, 'rateLimit': 60},
        {'name': 'y', 'active': False, 'priority': 3, 'rateLimit': 60},
    ]


def test_discover_reports_missing_modules_instead_of_swallowing():
    registry = ProviderRegistry()
    settings = Settings(provider_names=['nosuchvendor'])
    unavailable = registry.discover(['nosuchvendor'], settings)
    assert 'nosuchvendor' in unavailable
    assert 'import failed' in unavailable['nosuchvendor']
    assert len(registry) == 0


def test_discover_registers_builtin_providers_inactive_without_keys():
    registry = ProviderRegistry()
    settings = Settings(providers={
        'openai': ProviderSettings(name='openai', priority=10),
        'gemini': ProviderSettings(name='gemini', priority=9),
        'perplexity': ProviderSettings(name='perplexity', priority=8),
    })
    unavailable = registry.discover(['openai', 'gemini', 'perplexity'], settings)
    assert unavailable == {}
    assert [p.name for p in registry.providers] == ['openai', 'gemini', 'perplexity']
    assert not any(p.is_active for p in registry.providers)


def test_discover_active_provider_is_selected():
    registry = ProviderRegistry()
    settings = Settings(providers={
        'openai': ProviderSettings(name='openai', priority=10),
        'gemini': ProviderSettings(name='gemini', api_key='g-key', priority=9),
    })
    registry.discover(['openai', 'gemini'], settings)
    assert registry.select().name == 'gemini'


def test_build_brain_strict_mode_fails_fast():
    settings = Settings(provider_names=['openai', 'nosuchvendor'], strict_providers=True)
    with pytest.raises(ProviderConfigurationError) as exc:
        build_brain(settings)
    assert 'nosuchvendor' in exc.value.unavailable


def test_build_brain_lenient_mode_reports_unavailable():
    settings = Settings(provider_names=['openai', 'nosuchvendor'])
    brain = build_brain(settings)
    status = brain.status()
    assert [p['name'] for p in status['providers']] == ['openai']
    assert 'nosuchvendor' in status['unavailable']
    assert status['selected'] is None


def test_build_brain_dev_provider_is_active_at_priority_zero():
    brain = build_brain(Settings(provider_names=[], dev_provider=True))
    selected = brain.registry.select()
    assert selected.name == 'dev'
    assert selected.priority == 0
