from typing import Tuple, Dict, Optional
from uuid import uuid4

from chalice import Response
from chalice.app import Request

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.status_codes import http200, http201
from chalicelib.utils import auth as utils_auth, app as utils_app, data as utils_data
from chalicelib.utils.exceptions import RecordNotFound, ValidationException
from chalicelib.utils.logger import logger, log_request, set_request_id

# Profile fields a user can change. All of them are sent on every update, a missing one is cleared.
PROFILE_FIELDS = ('name', 'address_line1', 'city', 'country')


class User(EntityBase):
    pk = keys_structure.users_pk
    sk = keys_structure.users_sk

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'auth0_id': lambda x: isinstance(x, str) and len(x) > 0,
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'date_updated': lambda x: isinstance(x, str)
    }

    optional_fields_validation = {
        'email': lambda x: isinstance(x, str),
        'name': lambda x: isinstance(x, str),
        'address_line1': lambda x: isinstance(x, str),
        'city': lambda x: isinstance(x, str),
        'country': lambda x: isinstance(x, str)
    }

    deletable_fields = list(PROFILE_FIELDS)

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        self.auth0_id: str = kwargs.get('auth0_id')
        self.email: str = kwargs.get('email')
        self.name: str = kwargs.get('name')
        self.address_line1: str = kwargs.get('address_line1')
        self.city: str = kwargs.get('city')
        self.country: str = kwargs.get('country')
        self.date_created: str = kwargs.get('date_created') or utils_data.get_timestamp()
        self.date_updated: str = kwargs.get('date_updated') or self.date_created
        self.record_type = 'user'

    @classmethod
    def init_by_id(cls, id_):
        logger.info("init_by_id ::: started")
        c = cls(id_)
        c._reload()
        return c

    @classmethod
    def find_by_id(cls, id_) -> Optional['User']:
        try:
            return cls.init_by_id(id_)
        except RecordNotFound:
            return None

    @classmethod
    def find_by_auth0_id(cls, auth0_id) -> Optional['User']:
        user_record = utils_auth.get_user_record_by_auth0_id(auth0_id)
        return cls(**user_record) if user_record else None

    @staticmethod
    @utils_app.request_exception_handler
    @utils_app.log_start_finish
    def endpoint_create_user(request: Request) -> Response:
        """
        Called by the front end right after login. Creating an existing user is a no-op.
        """
        set_request_id(request)
        log_request(request)
        request_body = EntityBase.request_body_to_db(utils_data.parse_raw_body(request))
        auth0_id = request_body.get('auth0_id')
        if not isinstance(auth0_id, str) or not auth0_id:
            raise ValidationException('auth0Id is required')

        if User.find_by_auth0_id(auth0_id) is not None:
            logger.info(f'endpoint_create_user ::: user with {auth0_id=} already exists')
            return Response(status_code=http200, body='')

        user = User(
            id_=str(uuid4()),
            auth0_id=auth0_id,
            **{key: request_body.get(key) for key in ('email', *PROFILE_FIELDS)}
        )
        user._create_db_record()
        return Response(status_code=http201, body=user._to_ui())

    @staticmethod
    @utils_app.request_exception_handler
    @utils_auth.authenticate
    @utils_app.log_start_finish
    def endpoint_get_user(request: Request) -> Response:
        user = User.init_by_id(request.auth_result['user_id'])
        return Response(status_code=http200, body=user._to_ui())

    @staticmethod
    @utils_app.request_exception_handler
    @utils_auth.authenticate
    @utils_app.log_start_finish
    def endpoint_update_user(request: Request) -> Response:
        user = User.init_by_id(request.auth_result['user_id'])
        request_body = EntityBase.request_body_to_db(utils_data.parse_raw_body(request))
        for field in PROFILE_FIELDS:
            setattr(user, field, request_body.get(field))
        user._update_db_record()
        user._reload()
        return Response(status_code=http200, body=user._to_ui())

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(user_id=self.id_)

    def _to_dict(self) -> Dict:
        return {
            'id_': self.id_,
            'auth0_id': self.auth0_id,
            'email': self.email,
            'name': self.name,
            'address_line1': self.address_line1,
            'city': self.city,
            'country': self.country,
            'date_created': self.date_created,
            'date_updated': self.date_updated
        }
