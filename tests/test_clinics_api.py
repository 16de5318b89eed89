from healthlink.storage import Clinic


def test_healthz(client):
    resp = client.get('/healthz')
    assert resp.status_code == 200
    assert resp.get_json() == {'status': 'ok'}


def test_list_clinics_returns_seed_data(client):
    resp = client.get('/api/clinics')
    assert resp.status_code == 200
    data = resp.get_json()
    assert [c['name'] for c in data] == ['City Medical Center', 'QuickCare Urgent Care', 'Family Health Partners']
    assert resp.headers['Cache-Control'].startswith('no-store')


def test_search_by_coordinates_radius(client):
    resp = client.post('/api/clinics/search', json={'latitude': 40.7128, 'longitude': -74.0060, 'radius': 1})
    assert resp.status_code == 200
    data = resp.get_json()
    assert [r['clinic']['name'] for r in data] == ['City Medical Center']
    assert data[0]['distance'] == 0

    resp = client.post('/api/clinics/search', json={'latitude': 40.7128, 'longitude': -74.0060, 'radius': 5})
    names = [r['clinic']['name'] for r in resp.get_json()]
    assert names[0] == 'City Medical Center'
    assert set(names) == {'City Medical Center', 'QuickCare Urgent Care', 'Family Health Partners'}


def test_search_type_filter_applies_after_location(client):
    resp = client.post('/api/clinics/search', json={
        'latitude': 40.7128, 'longitude': -74.0060, 'radius': 10, 'type': 'urgent',
    })
    assert [r['clinic']['name'] for r in resp.get_json()] == ['QuickCare Urgent Care']


def test_search_by_text_query_has_zero_distance(client):
    resp = client.post('/api/clinics/search', json={'query': 'family'})
    data = resp.get_json()
    assert [r['clinic']['name'] for r in data] == ['Family Health Partners']
    assert data[0]['distance'] == 0


def test_search_without_criteria_returns_everything(client):
    resp = client.post('/api/clinics/search', json={})
    assert len(resp.get_json()) == 3


def test_search_by_location_geocodes_first(client, maps):
    maps.geocoded['Times Square'] = {'latitude': 40.7589, 'longitude': -73.9851}
    resp = client.post('/api/clinics/search', json={'location': 'Times Square', 'radius': 1})
    data = resp.get_json()
    assert resp.status_code == 200
    assert [r['clinic']['name'] for r in data] == ['QuickCare Urgent Care', 'Family Health Partners']
    assert maps.calls[0] == ('geocode', 'Times Square')


def test_search_unknown_location_returns_empty(client):
    resp = client.post('/api/clinics/search', json={'location': 'Atlantis'})
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_search_invalid_coordinate_is_400(client):
    resp = client.post('/api/clinics/search', json={'latitude': 'north', 'longitude': -74.0})
    assert resp.status_code == 400
    assert 'latitude' in resp.get_json()['error'].lower()

    resp = client.post('/api/clinics/search', json={'latitude': 95, 'longitude': -74.0})
    assert resp.status_code == 400


def test_search_validation_error_shape(client):
    resp = client.post('/api/clinics/search', json={'radius': 'far'})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['error'] == 'Invalid data'
    detail = body['details'][0]
    assert detail['path'] == ['radius']
    assert set(detail) == {'path', 'message', 'code'}


def test_nearby_combines_local_and_places_results(client, maps):
    maps.places = [Clinic(id='place-1', name='Places Hospital', address='5 Broad St',
                          latitude='40.7138', longitude='-74.0070', type='hospital')]
    resp = client.post('/api/clinics/nearby', json={'latitude': 40.7128, 'longitude': -74.0060, 'radius': 2000})
    assert resp.status_code == 200
    data = resp.get_json()
    assert [r['clinic']['name'] for r in data] == ['City Medical Center', 'Places Hospital']
    assert 0 < data[1]['distance'] < 0.2
    assert maps.calls[0] == ('nearby', 40.7128, -74.006, 2000.0, 'hospital')


def test_nearby_skips_places_when_maps_not_configured(client, maps):
    maps.configured = False
    resp = client.post('/api/clinics/nearby', json={'latitude': 40.7128, 'longitude': -74.0060})
    assert resp.status_code == 200
    assert all(not c[0] == 'nearby' for c in maps.calls)
    assert len(resp.get_json()) == 3


def test_nearby_requires_coordinates(client):
    resp = client.post('/api/clinics/nearby', json={'latitude': 40.7})
    assert resp.status_code == 400
    assert resp.get_json()['details'][0]['path'] == ['longitude']


def test_create_clinic_validates_coordinates(client):
    resp = client.post('/api/clinics', json={
        'name': 'Harbor Clinic', 'address': '1 Pier', 'latitude': 40.70, 'longitude': -74.01, 'type': 'general',
    })
    assert resp.status_code == 201
    created = resp.get_json()
    assert created['latitude'] == '40.7'
    assert any(c['id'] == created['id'] for c in client.get('/api/clinics').get_json())

    resp = client.post('/api/clinics', json={
        'name': 'Broken', 'address': 'Nowhere', 'latitude': 'abc', 'longitude': -74.0, 'type': 'general',
    })
    assert resp.status_code == 400
    assert resp.get_json()['details'][0]['path'] == ['latitude']


def test_place_details_and_directions(client):
    resp = client.get('/api/places/known')
    assert resp.status_code == 200
    assert resp.get_json()['name'] == 'Known Place'
    assert client.get('/api/places/unknown').status_code == 404

    resp = client.post('/api/directions', json={'origin': 'A', 'destination': 'B'})
    assert resp.status_code == 200
    assert resp.get_json()['duration'] == '10 mins'


def test_search_geocode_failure_returns_empty_list(client, maps):
    maps.error = 'Maps geocode/json HTTP 503'
    resp = client.post('/api/clinics/search', json={'location': 'Times Square'})
    assert resp.status_code == 200
    assert resp.get_json() == []
    assert maps.calls == [('geocode', 'Times Square')]


def test_nearby_places_failure_keeps_local_results(client, maps):
    maps.error = 'Maps place/nearbysearch/json HTTP 503'
    resp = client.post('/api/clinics/nearby', json={'latitude': 40.7128, 'longitude': -74.0060, 'radius': 2000})
    assert resp.status_code == 200
    assert [r['clinic']['name'] for r in resp.get_json()] == ['City Medical Center']
    assert maps.calls[0][0] == 'nearby'


def test_direct_maps_calls_still_fail_loudly(client, maps):
    maps.error = 'Maps error: REQUEST_DENIED'
    resp = client.get('/api/places/known')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Maps error: REQUEST_DENIED'}

    resp = client.post('/api/directions', json={'origin': 'A', 'destination': 'B'})
    assert resp.status_code == 500
