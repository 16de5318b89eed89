import pytest

from healthlink.brain import AIBrain, DispatchRequest, ProviderRegistry, RequestKind
from healthlink.storage import MemStorage

from conftest import FakeProvider


def _brain(*providers, storage=None):
    registry = ProviderRegistry()
    for p in providers:
        registry.register(p)
    return AIBrain(registry, storage=storage)


def test_no_active_provider_returns_failure_envelope():
    brain = _brain(FakeProvider('off', active=False))
    resp = brain.dispatch(DispatchRequest(kind=RequestKind.CHAT, specialization='general',
                                          input={'messages': []}))
    assert resp.success is False
    assert resp.error == 'NoProviderAvailable'
    assert resp.provider == 'unknown'
    out = resp.to_dict()
    assert out['success'] is False
    assert out['error'] == 'NoProviderAvailable'
    assert 'data' not in out


def test_empty_registry_does_not_raise():
    resp = _brain().analyze_symptoms('persistent headache for days')
    assert resp.success is False
    assert resp.error == 'NoProviderAvailable'


@pytest.mark.parametrize('kind, payload, expected_call', [
    (RequestKind.CHAT, {'messages': [{'role': 'user', 'content': 'hi'}], 'options': {'temperature': 0.1}}, 'chat'),
    (RequestKind.ANALYSIS, {'symptoms': 'cough'}, 'analyze'),
    (RequestKind.PREDICTION, {'data': [1, 2]}, 'predict'),
    (RequestKind.EDUCATION, {'query': 'What is BMI?'}, 'educate'),
    (RequestKind.EMOTION, {'data': 'I feel fine', 'type': 'text'}, 'emotion'),
])
def test_dispatch_routes_kind_to_provider_method(kind, payload, expected_call):
    provider = FakeProvider()
    resp = _brain(provider).dispatch(DispatchRequest(kind=kind, specialization='symptoms', input=payload))
    assert resp.success is True
    assert provider.calls[0][0] == expected_call
    assert resp.provider == 'fake'
    assert resp.model == 'fake-model'
    assert resp.response_time >= 0


def test_dispatch_passes_arguments_through():
    provider = FakeProvider()
    brain = _brain(provider)
    brain.dispatch(DispatchRequest(kind=RequestKind.EMOTION, specialization='x',
                                   input={'data': {'pitch': 1}, 'type': 'voice'}))
    brain.dispatch(DispatchRequest(kind=RequestKind.EDUCATION, specialization='x',
                                   input={'query': 'sleep', 'options': {'level': 'beginner'}}))
    assert provider.calls[0] == ('emotion', {'pitch': 1}, 'voice')
    assert provider.calls[1] == ('educate', 'sleep', {'level': 'beginner'})


def test_dispatch_uses_highest_priority_provider():
    low, high = FakeProvider('low', priority=1), FakeProvider('high', priority=9)
    resp = _brain(low, high).chat([{'role': 'user', 'content': 'hello'}])
    assert resp.provider == 'high'
    assert high.calls and not low.calls


def test_provider_error_is_captured_not_raised_or_retried():
    failing = FakeProvider('primary', priority=9, error='Primary analysis error: boom')
    backup = FakeProvider('backup', priority=1)
    brain = _brain(failing, backup)
    resp = brain.dispatch(DispatchRequest(kind=RequestKind.ANALYSIS, specialization='symptoms',
                                          input={'symptoms': 'x'}, fallback=True))
    assert resp.success is False
    assert resp.error == 'Primary analysis error: boom'
    assert resp.provider == 'primary'
    assert len(failing.calls) == 1
    assert backup.calls == []


def test_convenience_operations_build_expected_requests():
    provider = FakeProvider()
    brain = _brain(provider)
    brain.analyze_symptoms('sore throat and fever', {'age': 30})
    brain.analyze_nutrition(['apple'], {'healthGoals': 'energy'})
    brain.assess_mental_health('PHQ-9', {'q1': 2})
    brain.create_fitness_plan({'experience': 'beginner'}, 'run 5k')
    brain.analyze_health_trends([{'type': 'sleep'}])
    assert [c[2] for c in provider.calls] == ['symptoms', 'nutrition', 'mental_health', 'fitness', 'health_trends']
    assert provider.calls[0][1] == {'symptoms': 'sore throat and fever', 'patientInfo': {'age': 30}}
    assert provider.calls[2][1] == {'assessmentType': 'PHQ-9', 'responses': {'q1': 2}}

    brain.predict_disease_trends({'cases': 3}, region='EU')
    brain.educational_query('hydration', level='advanced')
    brain.analyze_emotions('tired', 'text')
    assert provider.calls[5] == ('predict', {'data': {'cases': 3}, 'region': 'EU'})
    assert provider.calls[6] == ('educate', 'hydration', {'level': 'advanced'})
    assert provider.calls[7] == ('emotion', 'tired', 'text')


def test_dispatch_records_interactions():
    storage = MemStorage(seed_clinics=False)
    brain = _brain(FakeProvider(replies={'symptoms': {'condition': 'cold'}}), storage=storage)
    brain.analyze_symptoms('runny nose and sneezing', user_id='u1')
    _brain(storage=storage).chat([], user_id='u1')

    records = storage.get_ai_interactions('u1')
    assert len(records) == 2
    by_success = {r.success: r for r in records}
    assert by_success[True].provider == 'fake'
    assert by_success[True].request_type == 'analysis'
    assert by_success[True].output == {'condition': 'cold'}
    assert by_success[False].output == {'error': 'NoProviderAvailable'}


def test_status_lists_providers_and_selection():
    brain = _brain(FakeProvider('a', priority=2), FakeProvider('b', priority=4, active=False))
    status = brain.status()
    assert status['selected'] == 'a'
    assert [p['name'] for p in status['providers']] == ['a', 'b']
    assert status['unavailable'] == {}
