import jwt

from chalicelib.utils import auth as utils_auth
from request_utils import make_request, response_body


def test_index(client):
    response = client.http.get('/health-check')
    assert response.json_body == {'health': 'check'}


def test_missing_token_is_unauthorized(client):
    response = make_request(client, endpoint='/api/my/restaurant')
    assert response.status_code == 401
    assert response_body(response)['exception'] == 'NotAuthorizedException'


def test_invalid_token_is_unauthorized(client, monkeypatch):
    def decode_access_token(token):
        raise jwt.InvalidTokenError('Signature verification failed')

    monkeypatch.setattr(utils_auth, 'decode_access_token', decode_access_token)
    response = make_request(client, endpoint='/api/my/restaurant', token='forged-token')
    assert response.status_code == 401


def test_unknown_user_is_unauthorized(client):
    response = make_request(client, endpoint='/api/my/user', token='auth0|never-logged-in')
    assert response.status_code == 401
