import threading

import fakeredis
import pytest

from healthlink.config import StorageSettings
from healthlink.storage import (
    AiInteraction,
    ChatSession,
    Clinic,
    FitnessPlan,
    HealthLog,
    MemStorage,
    RedisStorage,
    SymptomAnalysis,
    build_storage,
)


@pytest.fixture(params=['memory', 'redis'])
def store(request):
    if request.param == 'memory':
        return MemStorage()
    return RedisStorage(fakeredis.FakeRedis(server=fakeredis.FakeServer()), key_prefix='test')


def test_seed_clinics_in_insertion_order(store):
    names = [c.name for c in store.get_clinics()]
    assert names == ['City Medical Center', 'QuickCare Urgent Care', 'Family Health Partners']


def test_seeding_is_idempotent():
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer())
    RedisStorage(client, key_prefix='seed')
    again = RedisStorage(client, key_prefix='seed')
    assert len(again.get_clinics()) == 3


def test_create_and_get_clinic(store):
    clinic = store.create_clinic(Clinic(name='New Clinic', address='9 Elm', latitude='40.0',
                                        longitude='-73.0', type='pharmacy'))
    fetched = store.get_clinic(clinic.id)
    assert fetched == clinic
    assert store.get_clinics()[-1].name == 'New Clinic'
    assert store.get_clinic('missing') is None


def test_search_clinics_and_location(store):
    assert [c.name for c in store.search_clinics('care', 'urgent')] == ['QuickCare Urgent Care']
    results = store.get_clinics_by_location(40.7128, -74.0060, 5)
    assert results[0].clinic.name == 'City Medical Center'
    assert results[0].distance == 0
    assert [r.distance for r in results] == sorted(r.distance for r in results)


def test_health_logs_newest_first_with_type_filter_and_delete(store):
    store.create_health_log(HealthLog(type='sleep', date='2024-01-01T08:00:00Z', description='6h', user_id='u1'))
    newest = store.create_health_log(HealthLog(type='mood', date='2024-03-01T08:00:00Z', description='good',
                                               user_id='u1'))
    store.create_health_log(HealthLog(type='sleep', date='2024-02-01T08:00:00Z', description='7h', user_id='u1'))
    store.create_health_log(HealthLog(type='sleep', date='2024-05-01', description='other user', user_id='u2'))

    logs = store.get_health_logs('u1')
    assert [log.date[:10] for log in logs] == ['2024-03-01', '2024-02-01', '2024-01-01']
    assert [log.description for log in store.get_health_logs('u1', 'sleep')] == ['7h', '6h']

    assert store.delete_health_log(newest.id) is True
    assert store.delete_health_log(newest.id) is False
    assert len(store.get_health_logs('u1')) == 2


def test_chat_session_update_and_listing(store):
    older = store.create_chat_session(ChatSession(user_id='u1', updated_at='2024-01-01T00:00:00Z'))
    newer = store.create_chat_session(ChatSession(user_id='u1', updated_at='2024-02-01T00:00:00Z'))
    assert [s.id for s in store.get_chat_sessions('u1')] == [newer.id, older.id]

    messages = [{'id': '1', 'role': 'user', 'content': 'hi', 'timestamp': '2024-03-01T00:00:00Z'}]
    updated = store.update_chat_session(older.id, messages)
    assert updated.messages == messages
    assert store.get_chat_session(older.id).messages == messages
    assert [s.id for s in store.get_chat_sessions('u1')] == [older.id, newer.id]
    assert store.update_chat_session('missing', messages) is None


def test_analyses_and_plans_filtered_by_user(store):
    store.create_symptom_analysis(SymptomAnalysis(symptoms='cough for a week', analysis={'urgency': 'low'},
                                                  user_id='u1'))
    store.create_fitness_plan(FitnessPlan(goals='run', user_id='u2'))
    assert len(store.get_symptom_analyses('u1')) == 1
    assert store.get_symptom_analyses('u2') == []
    assert len(store.get_fitness_plans()) == 1
    assert store.get_fitness_plans('u1') == []


def test_ai_interactions_round_trip_structured_payloads(store):
    store.record_ai_interaction(AiInteraction(
        request_type='analysis', specialization='symptoms', provider='openai', model='gpt-4o-mini',
        success=True, user_id='u1', input={'symptoms': 'x'}, output={'condition': 'cold'}, response_time=12,
    ))
    [record] = store.get_ai_interactions('u1')
    assert record.output == {'condition': 'cold'}
    assert record.response_time == 12


def test_stored_records_are_isolated_from_caller_mutation():
    store = MemStorage(seed_clinics=False)
    session = store.create_chat_session(ChatSession(user_id='u1'))
    session.messages.append({'role': 'user', 'content': 'leak'})
    assert store.get_chat_session(session.id).messages == []


def test_record_to_dict_is_camel_case():
    log = HealthLog(type='sleep', date='2024-01-01', description='ok', user_id='u1')
    data = log.to_dict()
    assert data['userId'] == 'u1'
    assert 'createdAt' in data
    assert HealthLog.from_dict(data) == log


def test_build_storage_selects_backend():
    assert isinstance(build_storage(StorageSettings(backend='memory')), MemStorage)
    assert isinstance(build_storage(StorageSettings(backend='redis', use_fakeredis=True)), RedisStorage)
    assert build_storage(StorageSettings(backend='memory', seed_clinics=False)).get_clinics() == []


def test_memory_chat_update_waits_for_store_lock():
    store = MemStorage(seed_clinics=False)
    session = store.create_chat_session(ChatSession(user_id='u1'))
    messages = [{'id': '1', 'role': 'user', 'content': 'hi', 'timestamp': '2024-03-01T00:00:00Z'}]
    worker = threading.Thread(target=store.update_chat_session, args=(session.id, messages))

    with store._locked('chat_sessions', session.id):
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert store.get_chat_session(session.id).messages == []
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert store.get_chat_session(session.id).messages == messages
