from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from .. import geo
from ..errors import NotFoundError, UpstreamProviderError
from ..schemas import ClinicCreate, ClinicSearchRequest, DirectionsRequest, NearbySearchRequest, parse_body
from ..storage import Clinic
from . import fails_with, get_maps, get_storage

bp = Blueprint('clinics', __name__)


@bp.route('/clinics', methods=['GET'])
@fails_with('Failed to fetch clinics')
def list_clinics():
    return jsonify([c.to_dict() for c in get_storage().get_clinics()])


@bp.route('/clinics', methods=['POST'])
@fails_with('Failed to create clinic')
def create_clinic():
    body = parse_body(ClinicCreate)
    clinic = get_storage().create_clinic(Clinic(**body.model_dump()))
    return jsonify(clinic.to_dict()), 201


@bp.route('/clinics/search', methods=['POST'])
@fails_with('Failed to search clinics')
def search_clinics():
    """Body: { location?, latitude?, longitude?, radius=10 (miles), type?, query? }

    Resolution order: geocode ``location`` when no coordinates are given,
    else search around the coordinates, else text search on ``query``, else
    every clinic. Non-geographic results carry distance 0.
    """
    body = parse_body(ClinicSearchRequest)
    storage = get_storage()
    has_coords = body.latitude is not None and body.longitude is not None

    if body.location and not has_coords:
        results = []
        try:
            coords = get_maps().geocode_address(body.location)
        except UpstreamProviderError as e:
            current_app.logger.warning('Geocoding failed for clinic search: %s', e)
            coords = None
        if coords:
            results = storage.get_clinics_by_location(coords['latitude'], coords['longitude'], body.radius)
    elif has_coords:
        results = storage.get_clinics_by_location(body.latitude, body.longitude, body.radius)
    elif body.query:
        results = [geo.ClinicSearchResult(c, 0.0) for c in storage.search_clinics(body.query, body.type)]
    else:
        results = [geo.ClinicSearchResult(c, 0.0) for c in storage.get_clinics()]

    if body.type:
        results = [r for r in results if r.clinic.type == body.type]
    return jsonify([r.to_dict() for r in results])


@bp.route('/clinics/nearby', methods=['POST'])
@fails_with('Failed to find nearby clinics')
def nearby_clinics():
    """Body: { latitude, longitude, radius=10000 (metres), type='hospital' }

    Local clinics within the radius come first, then Google Places results
    (when Maps is configured and answers), each with its distance in miles.
    """
    body = parse_body(NearbySearchRequest)
    lat = geo.parse_coordinate(body.latitude, kind='latitude')
    lon = geo.parse_coordinate(body.longitude, kind='longitude')

    results = get_storage().get_clinics_by_location(lat, lon, geo.meters_to_miles(body.radius))
    maps = get_maps()
    if maps.is_configured():
        try:
            places = maps.search_nearby_healthcare(lat, lon, body.radius, body.type)
        except UpstreamProviderError as e:
            current_app.logger.warning('Places nearby search failed; returning local clinics only: %s', e)
            places = []
        for clinic in places:
            results.append(geo.ClinicSearchResult(clinic, geo.clinic_distance(clinic, lat, lon)))
    else:
        current_app.logger.debug('Maps not configured; nearby search uses local clinics only')
    return jsonify([r.to_dict() for r in results])


@bp.route('/places/<place_id>', methods=['GET'])
@fails_with('Failed to fetch place details')
def place_details(place_id: str):
    details = get_maps().get_place_details(place_id)
    if details is None:
        raise NotFoundError('Place not found')
    return jsonify(details)


@bp.route('/directions', methods=['POST'])
@fails_with('Failed to get directions')
def directions():
    body = parse_body(DirectionsRequest)
    route = get_maps().get_directions(body.origin, body.destination, body.mode)
    if route is None:
        raise NotFoundError('No route found')
    return jsonify(route)
