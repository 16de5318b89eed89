from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from ..config import MapsSettings
from ..errors import UpstreamProviderError
from ..storage import Clinic

logger = logging.getLogger(__name__)

# Google place type -> clinic type
GOOGLE_TYPE_MAP = {
    'hospital': 'hospital',
    'doctor': 'general',
    'pharmacy': 'pharmacy',
    'dentist': 'specialist',
    'physiotherapist': 'specialist',
}
EMPTY_STATUSES = ('ZERO_RESULTS', 'NOT_FOUND')
RETRY_HTTP_STATUSES = (429, 500, 502, 503, 504)


class TransientMapsError(UpstreamProviderError):
    """Connection failure or 429/5xx; safe to retry for idempotent reads."""


def map_google_type(google_type: str) -> str:
    return GOOGLE_TYPE_MAP.get(google_type, 'general')


class MapsService:
    """Thin client for the Google Geocoding, Places and Directions APIs.

    Only geocoding is retried (exponential backoff on 429/5xx, OVER_QUERY_LIMIT
    and connection errors); the other calls make a single attempt. Error
    statuses from Google raise ``UpstreamProviderError``; "no results" is not
    an error.
    """

    def __init__(self, settings: MapsSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    def is_configured(self) -> bool:
        return self.settings.configured

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url.rstrip('/')}/{path}"

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.is_configured():
            raise UpstreamProviderError('Google Maps API key not configured', provider='maps')
        query = dict(params)
        query['key'] = self.settings.api_key
        try:
            r = self.session.get(self._url(path), params=query, timeout=self.settings.timeout_s)
        except requests.RequestException as e:
            raise TransientMapsError(f'Maps {path} request failed: {e}', provider='maps')
        if r.status_code in RETRY_HTTP_STATUSES:
            raise TransientMapsError(f'Maps {path} HTTP {r.status_code}', provider='maps')
        if r.status_code != 200:
            raise UpstreamProviderError(f'Maps {path} HTTP {r.status_code}', provider='maps')
        try:
            return r.json()
        except ValueError:
            raise UpstreamProviderError(f'Maps {path} returned non-JSON body', provider='maps')

    @staticmethod
    def _check_status(path: str, data: Dict[str, Any]) -> bool:
        """True when results are present, False for an empty answer; raises otherwise."""
        status = data.get('status')
        if status == 'OK':
            return True
        if status in EMPTY_STATUSES:
            return False
        detail = data.get('error_message') or status or 'unknown status'
        raise UpstreamProviderError(f'Maps {path} error: {detail}', provider='maps')

    def geocode_address(self, address: str) -> Optional[Dict[str, float]]:
        path = 'geocode/json'
        attempts = self.settings.max_retries + 1
        for attempt in range(attempts):
            last = attempt == attempts - 1
            try:
                data = self._get(path, {'address': address})
                if data.get('status') == 'OVER_QUERY_LIMIT':
                    raise TransientMapsError(f'Maps {path} error: OVER_QUERY_LIMIT', provider='maps')
            except TransientMapsError as e:
                if last:
                    raise
                delay = self.settings.backoff_s * (2 ** attempt)
                logger.info('Geocoding attempt %d failed (%s); retrying in %.2fs', attempt + 1, e, delay)
                time.sleep(delay)
                continue
            if not self._check_status(path, data) or not data.get('results'):
                return None
            location = (data['results'][0].get('geometry') or {}).get('location') or {}
            if 'lat' not in location or 'lng' not in location:
                logger.warning('Geocoding result has no location')
                return None
            return {'latitude': float(location['lat']), 'longitude': float(location['lng'])}
        return None

    def search_nearby_healthcare(self, latitude: float, longitude: float, radius: float = 10000,
                                 place_type: str = 'hospital') -> List[Clinic]:
        path = 'place/nearbysearch/json'
        data = self._get(path, {
            'location': f'{latitude},{longitude}',
            'radius': int(radius),
            'type': place_type,
        })
        if not self._check_status(path, data):
            return []
        clinic_type = map_google_type(place_type)
        clinics = []
        for place in data.get('results') or []:
            location = (place.get('geometry') or {}).get('location') or {}
            if 'lat' not in location or 'lng' not in location:
                continue
            rating = place.get('rating')
            clinics.append(Clinic(
                id=place.get('place_id') or '',
                name=place.get('name') or '',
                address=place.get('vicinity') or '',
                latitude=str(location['lat']),
                longitude=str(location['lng']),
                type=clinic_type,
                rating=round(rating) if rating else None,
                hours='Open now' if (place.get('opening_hours') or {}).get('open_now') else 'Hours vary',
            ))
        return clinics

    def get_place_details(self, place_id: str) -> Optional[Dict[str, Any]]:
        path = 'place/details/json'
        data = self._get(path, {
            'place_id': place_id,
            'fields': 'name,formatted_address,formatted_phone_number,website,opening_hours,rating',
        })
        if not self._check_status(path, data):
            return None
        place = data.get('result') or {}
        weekday = (place.get('opening_hours') or {}).get('weekday_text') or []
        rating = place.get('rating')
        return {
            'name': place.get('name'),
            'address': place.get('formatted_address'),
            'phone': place.get('formatted_phone_number'),
            'website': place.get('website'),
            'hours': ', '.join(weekday) or 'Hours vary',
            'rating': round(rating) if rating else None,
        }

    def get_directions(self, origin: str, destination: str, mode: str = 'driving') -> Optional[Dict[str, Any]]:
        path = 'directions/json'
        data = self._get(path, {'origin': origin, 'destination': destination, 'mode': mode})
        if not self._check_status(path, data) or not data.get('routes'):
            return None
        legs = data['routes'][0].get('legs') or []
        if not legs:
            return None
        leg = legs[0]
        return {
            'duration': (leg.get('duration') or {}).get('text'),
            'distance': (leg.get('distance') or {}).get('text'),
            'steps': [step.get('html_instructions', '') for step in leg.get('steps') or []],
        }
