from designs.infrastructure.db import Database
from designs.main import create_app
from fastapi.testclient import TestClient
from helpers import data_url


def create(client, **body):
    return client.post('/api/designs', json=body)


def test_list_designs_empty(client):
    resp = client.get('/api/designs')
    assert resp.status_code == 200
    assert resp.json() == []


def test_create_design_returns_record(client):
    resp = create(client, name='  Fancy blouse ', type=' blouse ', images=[data_url('a'), data_url('b')])
    assert resp.status_code == 201
    body = resp.json()
    assert body['id'].startswith('D')
    assert body['name'] == 'Fancy blouse'
    assert body['type'] == 'blouse'
    assert body['images'] == [data_url('a'), data_url('b')]
    assert 'createdAt' in body and 'updatedAt' in body


def test_create_without_type_defaults_to_empty(client):
    resp = create(client, name='Saree fall', images=[data_url('a')])
    assert resp.status_code == 201
    assert resp.json()['type'] == ''


def test_blank_name_rejected_before_images(client):
    resp = create(client, name='   ', images=[])
    assert resp.status_code == 400
    assert resp.json() == {'error': 'name required'}

    resp = create(client, images=[data_url('a')])
    assert resp.status_code == 400
    assert resp.json() == {'error': 'name required'}


def test_whitespace_name_persists_nothing(client):
    resp = create(client, name='  ', images=[data_url('a')])
    assert resp.status_code == 400
    assert client.get('/api/designs').json() == []


def test_images_required_after_filtering(client):
    for images in (None, [], [1, None, {'a': 1}], 'not-a-list', {'0': data_url('a')}):
        resp = create(client, name='Kurti', images=images)
        assert resp.status_code == 400
        assert resp.json() == {'error': 'Add at least one image'}
    assert client.get('/api/designs').json() == []


def test_images_filtered_and_truncated(client):
    images = [42, data_url('a'), None, data_url('b'), data_url('c'), data_url('d')]
    resp = create(client, name='Lehenga', images=images)
    assert resp.status_code == 201
    assert resp.json()['images'] == [data_url('a'), data_url('b'), data_url('c')]


def test_non_string_type_becomes_empty(client):
    resp = create(client, name='Shirt', type=7, images=[data_url('a')])
    assert resp.status_code == 201
    assert resp.json()['type'] == ''


def test_malformed_body_is_bad_request(client):
    resp = client.post('/api/designs', content=b'{not json', headers={'Content-Type': 'application/json'})
    assert resp.status_code == 400
    assert 'error' in resp.json()


def test_ids_are_unique(client):
    ids = {create(client, name=f'Design {i}', images=[data_url(str(i))]).json()['id'] for i in range(20)}
    assert len(ids) == 20


def test_list_is_newest_first(client):
    first = create(client, name='First', images=[data_url('1')]).json()
    second = create(client, name='Second', images=[data_url('2')]).json()
    third = create(client, name='Third', images=[data_url('3')]).json()
    listed = [d['id'] for d in client.get('/api/designs').json()]
    assert listed == [third['id'], second['id'], first['id']]


def test_get_design(client):
    created = create(client, name='Blouse', images=[data_url('a')]).json()
    resp = client.get(f"/api/designs/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == created


def test_get_unknown_design(client):
    resp = client.get('/api/designs/DNOPE')
    assert resp.status_code == 404
    assert resp.json() == {'error': 'Design not found'}


def test_delete_unknown_design_is_not_found_every_time(client):
    created = create(client, name='Blouse', images=[data_url('a')]).json()
    assert client.delete(f"/api/designs/{created['id']}").json() == {'deleted': True}
    for _ in range(2):
        resp = client.delete(f"/api/designs/{created['id']}")
        assert resp.status_code == 404
        assert resp.json() == {'error': 'Design not found'}
    assert client.delete('/api/designs/DNEVER').status_code == 404


def test_create_list_delete_scenario(client):
    created = create(client, name='Fancy blouse', type='blouse', images=[data_url('front'), data_url('back')])
    assert created.status_code == 201
    design = created.json()
    create(client, name='Older', images=[data_url('x')])
    newest = create(client, name='Newest', images=[data_url('y')]).json()

    listed = client.get('/api/designs').json()
    assert listed[0]['id'] == newest['id']
    found = next(d for d in listed if d['id'] == design['id'])
    assert found['images'] == [data_url('front'), data_url('back')]

    resp = client.delete(f"/api/designs/{design['id']}")
    assert resp.status_code == 200
    assert resp.json() == {'deleted': True}

    assert design['id'] not in [d['id'] for d in client.get('/api/designs').json()]
    assert client.get(f"/api/designs/{design['id']}").status_code == 404


def test_storage_error_is_500(settings):
    # tables never created
    db = Database.from_settings(settings)
    client = TestClient(create_app(settings=settings, database=db))
    resp = client.get('/api/designs')
    assert resp.status_code == 500
    assert resp.json() == {'error': 'Storage unavailable'}

    resp = create(client, name='Blouse', images=[data_url('a')])
    assert resp.status_code == 500
    db.dispose()


def test_validation_runs_before_storage(settings):
    db = Database.from_settings(settings)
    client = TestClient(create_app(settings=settings, database=db))
    resp = create(client, name='', images=[data_url('a')])
    assert resp.status_code == 400
    db.dispose()


def test_request_id_header(client):
    resp = client.get('/api/designs', headers={'X-Request-ID': 'abc-123'})
    assert resp.headers['X-Request-ID'] == 'abc-123'
