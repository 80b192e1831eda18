import functools
import os
from typing import Dict, Optional

import jwt
from boto3.dynamodb.conditions import Attr, Key
from chalice.app import Request

from chalicelib.constants import keys_structure
from chalicelib.utils import exceptions as utils_exceptions, db as utils_db
from chalicelib.utils.logger import log_request, logger, set_request_id

_JWKS_CLIENT = None


def get_jwks_client() -> jwt.PyJWKClient:
    global _JWKS_CLIENT
    if _JWKS_CLIENT is None:
        _JWKS_CLIENT = jwt.PyJWKClient(f"https://{os.environ['AUTH0_DOMAIN']}/.well-known/jwks.json")
    return _JWKS_CLIENT


def decode_access_token(token: str) -> Dict:
    """
    Verifies the access token issued by Auth0 and returns its claims
    """
    signing_key = get_jwks_client().get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=['RS256'],
        audience=os.environ['AUTH0_AUDIENCE'],
        issuer=f"https://{os.environ['AUTH0_DOMAIN']}/"
    )


def get_bearer_token(request: Request) -> str:
    scheme, _, token = (request.headers.get('authorization') or '').partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        raise utils_exceptions.NotAuthorizedException('Bearer token is missing')
    return token.strip()


def get_user_record_by_auth0_id(auth0_id: str) -> Optional[Dict]:
    user_records = utils_db.query_items_paged(
        Key('partkey').eq(keys_structure.users_pk),
        filter_expression=Attr('auth0_id').eq(auth0_id)
    )
    return user_records[0] if user_records else None


def authenticate(func):
    """
    Wrapper for endpoints which require user's authentication.
    Resolves the token subject (auth0 id) to the stored user and sets request.auth_result
    """

    @functools.wraps(func)
    def result_auth(request, *args, **kwargs):
        set_request_id(request)
        log_request(request)
        try:
            claims = decode_access_token(get_bearer_token(request))
        except jwt.PyJWTError as err:
            raise utils_exceptions.NotAuthorizedException(f'Access token is not valid: {err}') from err
        auth0_id = claims.get('sub')
        user_record = get_user_record_by_auth0_id(auth0_id) if auth0_id else None
        if not user_record:
            raise utils_exceptions.NotAuthorizedException('Error occurred in authorization process')
        setattr(request, 'auth_result', {'user_id': user_record['id_'], 'auth0_id': auth0_id})
        logger.info(f'authenticate ::: SUCCESS, func.__name__ {func.__name__}')
        return func(request, *args, **kwargs)

    return result_auth
