from boto3.dynamodb.conditions import Key

from chalicelib.constants import keys_structure
from chalicelib.utils import db
from request_utils import create_user, make_request, response_body

auth0_id = 'auth0|5f7c8ec7c33c6c004bbafe82'


def count_users(auth0_id_):
    return len([record for record in db.query_items_paged(Key('partkey').eq(keys_structure.users_pk))
                if record['auth0_id'] == auth0_id_])


def test_create_user(client):
    response = make_request(client, endpoint='/api/my/user', method='POST',
                            json_body={'auth0Id': auth0_id, 'email': 'owner@test.com', 'role': 'admin'})

    assert response.status_code == 201
    body = response_body(response)
    assert body['auth0Id'] == auth0_id
    assert body['email'] == 'owner@test.com'
    assert body['id']
    assert 'role' not in body
    assert count_users(auth0_id) == 1


def test_create_user_is_idempotent(client):
    first = make_request(client, endpoint='/api/my/user', method='POST',
                         json_body={'auth0Id': auth0_id, 'email': 'owner@test.com'})
    second = make_request(client, endpoint='/api/my/user', method='POST',
                          json_body={'auth0Id': auth0_id, 'email': 'other@test.com'})

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.body == b''
    assert count_users(auth0_id) == 1


def test_create_user_without_auth0_id(client):
    response = make_request(client, endpoint='/api/my/user', method='POST', json_body={'email': 'owner@test.com'})
    assert response.status_code == 400


def test_get_user(client):
    user = create_user(client, auth0_id, name='Jane')

    response = make_request(client, endpoint='/api/my/user', token=auth0_id)

    assert response.status_code == 200
    body = response_body(response)
    assert body['id'] == user['id']
    assert body['name'] == 'Jane'
    assert 'partkey' not in body


def test_update_user(client):
    user = create_user(client, auth0_id)

    update_body = {
        'name': 'Jane Doe',
        'addressLine1': '12 Baker Street',
        'city': 'London',
        'country': 'United Kingdom',
        'email': 'hijack@test.com',
        'unexpected_field': 'unexpected_value'
    }
    response = make_request(client, endpoint='/api/my/user', method='PUT', json_body=update_body, token=auth0_id)

    assert response.status_code == 200
    body = response_body(response)
    assert body['id'] == user['id']
    assert body['name'] == 'Jane Doe'
    assert body['addressLine1'] == '12 Baker Street'
    assert body['city'] == 'London'
    assert body['country'] == 'United Kingdom'
    assert body['email'] == f'{auth0_id}@test.com'
    assert 'unexpected_field' not in body
    assert db.get_db_item(keys_structure.users_pk, user['id'])['name'] == 'Jane Doe'


def test_update_user_clears_missing_fields(client):
    create_user(client, auth0_id, name='Jane', addressLine1='12 Baker Street', city='London', country='UK')

    response = make_request(client, endpoint='/api/my/user', method='PUT',
                            json_body={'name': 'Jane', 'city': 'Paris', 'country': 'France'}, token=auth0_id)

    assert response.status_code == 200
    body = response_body(response)
    assert body['city'] == 'Paris'
    assert body['addressLine1'] is None


def test_update_deleted_user_not_found(client, monkeypatch):
    user = create_user(client, auth0_id)
    db.get_gen_table().delete_item(Key={'partkey': keys_structure.users_pk, 'sortkey': user['id']})
    monkeypatch.setattr('chalicelib.utils.auth.get_user_record_by_auth0_id', lambda _: {'id_': user['id']})

    response = make_request(client, endpoint='/api/my/user', method='PUT',
                            json_body={'name': 'Jane'}, token=auth0_id)

    assert response.status_code == 404
