import pytest


def checklist_body(seed, **overrides):
    body = {
        'vehicle_id': seed.vehicle_id,
        'items': [
            {'id': 'brakes', 'name': 'Brake system', 'status': 'ok'},
            {'id': 'tires', 'name': 'Tire condition', 'status': 'not_ok', 'note': 'Front left worn'},
        ],
        'notes': 'Saída do pátio',
        'checked_at': '2026-03-02T08:30:00Z',
    }
    body.update(overrides)
    return body


def supply_body(seed, **overrides):
    body = {
        'vehicle_id': seed.vehicle_id,
        'station_id': seed.station_id,
        'fuel_type': 'diesel',
        'liters': '40.50',
        'total_value': '230.85',
        'supplied_at': '2026-03-02T09:15:00Z',
    }
    body.update(overrides)
    return body


def test_health_is_public(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok'}


@pytest.mark.parametrize('headers', [
    {},
    {'Authorization': 'Bearer nonsense'},
    {'Authorization': 'Bearer 1.wrong-secret'},
])
def test_api_requires_a_valid_token(client, seed, headers):
    response = client.post('/api/checklists', json=checklist_body(seed), headers=headers)

    assert response.status_code == 401


def test_create_checklist(client, seed, auth_headers):
    response = client.post('/api/checklists', json=checklist_body(seed), headers=auth_headers)

    assert response.status_code == 201
    checklist_id = response.get_json()['id']

    stored = client.get(f'/api/checklists/{checklist_id}', headers=auth_headers).get_json()
    assert stored['vehicle_id'] == seed.vehicle_id
    assert stored['operator_id'] == seed.operator_id
    assert [item['status'] for item in stored['items']] == ['ok', 'not_ok']


@pytest.mark.parametrize('overrides', [
    {'items': []},
    {'items': [{'id': 'brakes', 'name': 'Brake system', 'status': 'broken'}]},
    {'vehicle_id': 'abc'},
    {'checked_at': 'yesterday'},
])
def test_invalid_checklist_is_rejected(client, seed, auth_headers, overrides):
    response = client.post('/api/checklists', json=checklist_body(seed, **overrides), headers=auth_headers)

    assert response.status_code == 400


def test_unknown_or_retired_vehicle_is_not_found(client, seed, auth_headers):
    for vehicle_id in (9999, seed.retired_vehicle_id):
        response = client.post('/api/checklists', json=checklist_body(seed, vehicle_id=vehicle_id),
                               headers=auth_headers)
        assert response.status_code == 404


def test_repeated_idempotency_key_returns_the_original_row(client, seed, auth_headers):
    headers = dict(auth_headers, **{'Idempotency-Key': 'b5b0f0a4-0d7e-4bb5-9f0e-0c3b8f1f2a11'})

    first = client.post('/api/checklists', json=checklist_body(seed), headers=headers)
    second = client.post('/api/checklists', json=checklist_body(seed), headers=headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.get_json() == {'id': first.get_json()['id'], 'duplicate': True}
    listed = client.get('/api/checklists', headers=auth_headers).get_json()['checklists']
    assert len(listed) == 1


def test_idempotency_keys_are_scoped_to_the_operator(client, seed, auth_headers, admin_headers):
    key = {'Idempotency-Key': 'k1'}

    admin_first = client.post('/api/checklists', json=checklist_body(seed, notes='Admin'),
                              headers=dict(admin_headers, **key))
    operator_first = client.post('/api/checklists', json=checklist_body(seed, notes='Operador'),
                                 headers=dict(auth_headers, **key))
    operator_again = client.post('/api/checklists', json=checklist_body(seed, notes='Operador'),
                                 headers=dict(auth_headers, **key))

    assert admin_first.status_code == 201
    assert operator_first.status_code == 201
    assert operator_first.get_json()['id'] != admin_first.get_json()['id']
    assert operator_again.status_code == 200
    assert operator_again.get_json() == {'id': operator_first.get_json()['id'], 'duplicate': True}

    stored = client.get(f"/api/checklists/{operator_first.get_json()['id']}", headers=auth_headers).get_json()
    assert stored['notes'] == 'Operador'
    assert stored['operator_id'] == seed.operator_id


def test_supply_idempotency_keys_are_scoped_to_the_operator(client, seed, auth_headers, admin_headers):
    key = {'Idempotency-Key': 'k2'}

    first = client.post('/api/supplies', json=supply_body(seed), headers=dict(admin_headers, **key))
    second = client.post('/api/supplies', json=supply_body(seed), headers=dict(auth_headers, **key))

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.get_json()['id'] != first.get_json()['id']


def test_operators_cannot_submit_for_someone_else(client, seed, auth_headers, admin_headers):
    body = checklist_body(seed, operator_id=seed.other_id)

    assert client.post('/api/checklists', json=body, headers=auth_headers).status_code == 403
    assert client.post('/api/checklists', json=body, headers=admin_headers).status_code == 201


def test_only_admins_delete_checklists(client, seed, auth_headers, admin_headers):
    checklist_id = client.post('/api/checklists', json=checklist_body(seed),
                               headers=auth_headers).get_json()['id']

    assert client.delete(f'/api/checklists/{checklist_id}', headers=auth_headers).status_code == 403
    assert client.delete(f'/api/checklists/{checklist_id}', headers=admin_headers).status_code == 204
    assert client.get(f'/api/checklists/{checklist_id}', headers=auth_headers).status_code == 404


def test_default_items(client, seed, auth_headers):
    items = client.get('/api/checklists/default-items', headers=auth_headers).get_json()['items']

    assert len(items) == 10
    assert {item['status'] for item in items} == {'not_applicable'}


def test_create_and_list_supplies(client, seed, auth_headers):
    response = client.post('/api/supplies', json=supply_body(seed), headers=auth_headers)
    assert response.status_code == 201

    supplies = client.get(f'/api/supplies?vehicle_id={seed.vehicle_id}',
                          headers=auth_headers).get_json()['supplies']
    assert len(supplies) == 1
    assert supplies[0]['liters'] == 40.5
    assert supplies[0]['total_value'] == 230.85
    assert supplies[0]['fuel_type'] == 'diesel'


@pytest.mark.parametrize('overrides', [
    {'liters': '0'},
    {'total_value': '-5'},
    {'fuel_type': 'kerosene'},
    {'station_id': None},
    {'liters': '123456789'},
    {'total_value': '1e12'},
])
def test_invalid_supply_is_rejected(client, seed, auth_headers, overrides):
    response = client.post('/api/supplies', json=supply_body(seed, **overrides), headers=auth_headers)

    assert response.status_code == 400


def test_supply_at_unknown_station_is_not_found(client, seed, auth_headers):
    response = client.post('/api/supplies', json=supply_body(seed, station_id=9999), headers=auth_headers)

    assert response.status_code == 404


def test_vehicle_lookup_by_qr_code(client, seed, auth_headers):
    found = client.get('/api/vehicles/qr/VEH-ABC1D23', headers=auth_headers)
    missing = client.get('/api/vehicles/qr/VEH-NOPE', headers=auth_headers)

    assert found.status_code == 200
    assert found.get_json()['plate'] == 'ABC1D23'
    assert missing.status_code == 404


def test_fleet_lists_only_active_records(client, seed, auth_headers):
    vehicles = client.get('/api/vehicles', headers=auth_headers).get_json()['vehicles']
    stations = client.get('/api/stations', headers=auth_headers).get_json()['stations']

    assert [vehicle['plate'] for vehicle in vehicles] == ['ABC1D23']
    assert [station['name'] for station in stations] == ['Posto Central']


def test_fuel_consumption_report(client, seed, auth_headers):
    for supplied_at, liters, value in [
        ('2026-03-02T09:15:00Z', '40.00', '200.00'),
        ('2026-03-20T18:00:00Z', '10.00', '60.00'),
        ('2026-04-01T07:00:00Z', '20.00', '110.00'),
    ]:
        client.post('/api/supplies', headers=auth_headers,
                    json=supply_body(seed, supplied_at=supplied_at, liters=liters, total_value=value))

    monthly = client.get('/api/reports/fuel-consumption?start=2026-03-01&end=2026-04-30',
                         headers=auth_headers).get_json()
    assert [(row['period'], row['liters'], row['supplies']) for row in monthly['rows']] == [
        ('2026-03', 50.0, 2),
        ('2026-04', 20.0, 1),
    ]
    assert monthly['rows'][0]['average_price'] == 5.2

    daily = client.get('/api/reports/fuel-consumption?start=2026-03-01&end=2026-03-31&bucket=day',
                       headers=auth_headers).get_json()
    assert [row['period'] for row in daily['rows']] == ['2026-03-02', '2026-03-20']

    breakdown = client.get('/api/reports/fuel-types?start=2026-03-01&end=2026-04-30',
                           headers=auth_headers).get_json()['fuel_types']
    assert breakdown == {'diesel': {'liters': 70.0, 'total_value': 370.0, 'supplies': 3}}


@pytest.mark.parametrize('query', [
    'bucket=week',
    'start=2026-04-01&end=2026-03-01',
    'start=01/03/2026',
])
def test_bad_report_parameters(client, seed, auth_headers, query):
    response = client.get(f'/api/reports/fuel-consumption?{query}', headers=auth_headers)

    assert response.status_code == 400
