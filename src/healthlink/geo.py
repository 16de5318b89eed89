from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from .errors import InvalidCoordinate

if TYPE_CHECKING:
    from .storage.models import Clinic

EARTH_RADIUS_MILES = 3959.0
METERS_PER_MILE = 1609.34
# Tolerance for the radius comparison so coincident points survive radius=0.
DISTANCE_EPSILON = 1e-9


@dataclass
class ClinicSearchResult:
    clinic: Clinic
    distance: float

    def to_dict(self) -> Dict[str, Any]:
        return {'clinic': self.clinic.to_dict(), 'distance': self.distance}


def parse_coordinate(value: Any, *, kind: str = 'latitude') -> float:
    """Parse a stored or submitted coordinate into a finite float in range."""
    if isinstance(value, bool):
        raise InvalidCoordinate(f'Invalid {kind}: {value!r}')
    try:
        parsed = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise InvalidCoordinate(f'Invalid {kind}: {value!r}')
    if not math.isfinite(parsed):
        raise InvalidCoordinate(f'Invalid {kind}: {value!r}')
    limit = 90.0 if kind == 'latitude' else 180.0
    if parsed < -limit or parsed > limit:
        raise InvalidCoordinate(f'{kind.capitalize()} out of range: {parsed}')
    return parsed


def distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    # Clamp against rounding pushing a past 1.0 for antipodal points.
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def clinic_distance(clinic: Clinic, latitude: float, longitude: float) -> float:
    lat = parse_coordinate(clinic.latitude, kind='latitude')
    lon = parse_coordinate(clinic.longitude, kind='longitude')
    return distance(latitude, longitude, lat, lon)


def search_by_location(clinics: Iterable[Clinic], latitude: float, longitude: float,
                       radius_miles: float) -> List[ClinicSearchResult]:
    """Clinics within ``radius_miles`` of the point, nearest first.

    ``sorted`` is stable, so clinics at equal distance keep storage order.
    """
    lat = parse_coordinate(latitude, kind='latitude')
    lon = parse_coordinate(longitude, kind='longitude')
    results = []
    for clinic in clinics:
        d = clinic_distance(clinic, lat, lon)
        if d <= radius_miles + DISTANCE_EPSILON:
            results.append(ClinicSearchResult(clinic=clinic, distance=d))
    return sorted(results, key=lambda r: r.distance)


def search_by_text(clinics: Iterable[Clinic], query: str, type_filter: Optional[str] = None) -> List[Clinic]:
    needle = (query or '').lower()
    out = []
    for clinic in clinics:
        matches_query = needle in (clinic.name or '').lower() or needle in (clinic.address or '').lower()
        matches_type = not type_filter or clinic.type == type_filter
        if matches_query and matches_type:
            out.append(clinic)
    return out


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE
