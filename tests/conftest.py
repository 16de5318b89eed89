from typing import Any, Dict, List, Optional

import pytest

from healthlink import create_app
from healthlink.brain import AIBrain, ProviderRegistry
from healthlink.config import Settings
from healthlink.errors import UpstreamProviderError
from healthlink.storage import Clinic, MemStorage


class FakeProvider:
    """In-memory provider; ``replies`` maps a specialization (or 'chat', 'predict', ...) to its answer."""

    def __init__(self, name: str = 'fake', priority: int = 5, active: bool = True, model: str = 'fake-model',
                 replies: Optional[Dict[str, Any]] = None, error: Optional[str] = None):
        self.name = name
        self.priority = priority
        self.is_active = active
        self.rate_limit = 60
        self.model = model
        self.replies = replies or {}
        self.error = error
        self.calls: List[tuple] = []

    def _answer(self, key: str, default: Any) -> Any:
        if self.error:
            raise UpstreamProviderError(self.error, provider=self.name)
        return self.replies.get(key, default)

    def chat(self, messages, options=None):
        self.calls.append(('chat', messages, options))
        return self._answer('chat', 'Hello from fake')

    def analyze(self, input, specialization, options=None):
        self.calls.append(('analyze', input, specialization))
        return self._answer(specialization, {'specialization': specialization})

    def predict(self, data, options=None):
        self.calls.append(('predict', data))
        return self._answer('predict', {'predictions': []})

    def educate(self, query, options=None):
        self.calls.append(('educate', query, options))
        return self._answer('educate', {'title': query})

    def process_emotion(self, data, input_type, options=None):
        self.calls.append(('emotion', data, input_type))
        return self._answer('emotion', {'overallMood': 'neutral'})


class FakeMaps:
    """Stand-in for MapsService; set ``error`` to make every lookup raise UpstreamProviderError."""

    def __init__(self, configured: bool = True, error: Optional[str] = None):
        self.configured = configured
        self.error = error
        self.geocoded: Dict[str, Dict[str, float]] = {}
        self.places: List[Clinic] = []
        self.calls: List[tuple] = []

    def is_configured(self):
        return self.configured

    def _maybe_fail(self):
        if self.error:
            raise UpstreamProviderError(self.error, provider='maps')

    def geocode_address(self, address):
        self.calls.append(('geocode', address))
        self._maybe_fail()
        return self.geocoded.get(address)

    def search_nearby_healthcare(self, latitude, longitude, radius=10000, place_type='hospital'):
        self.calls.append(('nearby', latitude, longitude, radius, place_type))
        self._maybe_fail()
        return list(self.places)

    def get_place_details(self, place_id):
        self.calls.append(('details', place_id))
        self._maybe_fail()
        if place_id == 'known':
            return {'name': 'Known Place', 'phone': '(555) 000-0000', 'hours': 'Hours vary', 'rating': 4}
        return None

    def get_directions(self, origin, destination, mode='driving'):
        self.calls.append(('directions', origin, destination, mode))
        self._maybe_fail()
        return {'duration': '10 mins', 'distance': '2.1 mi', 'steps': ['Head north']}


@pytest.fixture()
def provider():
    return FakeProvider()


@pytest.fixture()
def storage():
    return MemStorage()


@pytest.fixture()
def brain(provider, storage):
    registry = ProviderRegistry()
    registry.register(provider)
    return AIBrain(registry, storage=storage)


@pytest.fixture()
def maps():
    return FakeMaps()


@pytest.fixture()
def app(brain, storage, maps):
    app = create_app(Settings(provider_names=[]), storage=storage, brain=brain, maps=maps)
    app.config.update({'TESTING': True})
    return app


@pytest.fixture()
def client(app):
    return app.test_client()
