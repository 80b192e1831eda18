from decimal import Decimal
from typing import Tuple, List, Dict, Optional, Any
from uuid import uuid4

from boto3.dynamodb.conditions import Attr, Key
from chalice import Response
from chalice.app import Request

from chalicelib import images
from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.status_codes import http200, http201
from chalicelib.utils import auth as utils_auth, data as utils_data, exceptions, db as utils_db, app as utils_app
from chalicelib.utils.logger import logger

# Fields taken from the owner's form, everything else in the body is ignored
REQUEST_FIELDS = ('restaurant_name', 'address', 'city', 'country', 'delivery_price',
                  'estimated_delivery_time', 'cuisines', 'menu_items')


def _is_filled_str(value) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _is_menu_item(item) -> bool:
    return isinstance(item, dict) and _is_filled_str(item.get('name')) and \
        isinstance(item.get('price'), Decimal) and item['price'] >= 0


def _number_or_raw(value: Any, converter) -> Any:
    converted = converter(value)
    return value if converted is None else converted


def normalize_menu_items(menu_items: Any) -> Any:
    if not isinstance(menu_items, list):
        return menu_items
    return [
        {'name': item.get('name'), 'price': _number_or_raw(item.get('price'), utils_data.to_decimal)}
        if isinstance(item, dict) else item
        for item in menu_items
    ]


class Restaurant(EntityBase):
    pk = keys_structure.restaurants_pk
    sk = keys_structure.restaurants_sk

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'user_id': lambda x: isinstance(x, str),
        'date_created': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'restaurant_name': _is_filled_str,
        'city': _is_filled_str,
        'country': _is_filled_str,
        'delivery_price': lambda x: isinstance(x, Decimal) and x >= 0,
        'estimated_delivery_time': lambda x: isinstance(x, int) and not isinstance(x, bool) and x >= 0,
        'cuisines': lambda x: isinstance(x, list) and len(x) > 0 and all(_is_filled_str(c) for c in x),
        'menu_items': lambda x: isinstance(x, list) and all(_is_menu_item(item) for item in x),
        'image_url': _is_filled_str,
        'last_updated': lambda x: isinstance(x, str)
    }

    optional_fields_validation = {
        'address': lambda x: isinstance(x, str)
    }

    deletable_fields = list(REQUEST_FIELDS)
    updated_at_field = 'last_updated'

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        self.user_id: str = kwargs.get('user_id')
        self.apply_request_body(kwargs)
        self.image_url: str = kwargs.get('image_url')
        self.date_created: str = kwargs.get('date_created') or utils_data.get_timestamp()
        self.last_updated: str = kwargs.get('last_updated') or self.date_created
        self.record_type = 'restaurant'

    def apply_request_body(self, body: Dict) -> None:
        """
        Overwrites every owner-editable field, a field missing from body is cleared
        """
        cuisines = body.get('cuisines')
        self.restaurant_name: str = body.get('restaurant_name')
        self.address: str = body.get('address')
        self.city: str = body.get('city')
        self.country: str = body.get('country')
        self.delivery_price: Decimal = _number_or_raw(body.get('delivery_price'), utils_data.to_decimal)
        self.estimated_delivery_time: int = _number_or_raw(body.get('estimated_delivery_time'), utils_data.to_int)
        self.cuisines: List[str] = [cuisines] if isinstance(cuisines, str) else cuisines
        self.menu_items: List[Dict] = normalize_menu_items(body.get('menu_items'))

    @classmethod
    def init_by_id(cls, restaurant_id):
        logger.info("init_by_id ::: started")
        c = cls(restaurant_id)
        c._reload()
        return c

    @classmethod
    def find_by_id(cls, restaurant_id) -> Optional['Restaurant']:
        try:
            return cls.init_by_id(restaurant_id)
        except exceptions.RecordNotFound:
            return None

    @classmethod
    def find_by_user_id(cls, user_id) -> Optional['Restaurant']:
        restaurant_db_records: List[Dict] = utils_db.query_items_paged(
            Key('partkey').eq(keys_structure.restaurants_pk),
            filter_expression=Attr('user_id').eq(user_id)
        )
        if len(restaurant_db_records) > 1:
            logger.warning(f'find_by_user_id ::: {user_id=} owns {len(restaurant_db_records)} restaurants')
        return cls(**restaurant_db_records[0]) if restaurant_db_records else None

    @classmethod
    def init_by_user_id(cls, user_id) -> 'Restaurant':
        restaurant = cls.find_by_user_id(user_id)
        if restaurant is None:
            raise exceptions.RecordNotFound('restaurant not found')
        return restaurant

    def is_owned_by(self, user_id) -> bool:
        return self.user_id is not None and self.user_id == user_id

    @staticmethod
    @utils_app.request_exception_handler
    @utils_auth.authenticate
    @utils_app.log_start_finish
    def endpoint_get_my_restaurant(request: Request) -> Response:
        restaurant = Restaurant.init_by_user_id(request.auth_result['user_id'])
        logger.info(f"endpoint_get_my_restaurant ::: returning restaurant={restaurant.id_}")
        return Response(status_code=http200, body=restaurant._to_ui())

    @staticmethod
    @utils_app.request_exception_handler
    @utils_auth.authenticate
    @utils_app.log_start_finish
    def endpoint_create_my_restaurant(request: Request) -> Response:
        user_id = request.auth_result['user_id']
        if Restaurant.find_by_user_id(user_id) is not None:
            raise exceptions.RecordAlreadyExists('Restaurant already exists')

        fields, image_file = images.parse_multipart_request_data(request)
        request_body = EntityBase.request_body_to_db(fields)
        restaurant = Restaurant(
            id_=str(uuid4()),
            user_id=user_id,
            **{key: request_body.get(key) for key in REQUEST_FIELDS}
        )
        restaurant._validate_request_fields()
        if image_file is None:
            raise exceptions.ValidationException('imageFile is required')

        restaurant.image_url = images.upload_image(image_file)
        restaurant.last_updated = utils_data.get_timestamp()
        restaurant._create_db_record()
        return Response(status_code=http201, body=restaurant._to_ui())

    @staticmethod
    @utils_app.request_exception_handler
    @utils_auth.authenticate
    @utils_app.log_start_finish
    def endpoint_update_my_restaurant(request: Request) -> Response:
        restaurant = Restaurant.init_by_user_id(request.auth_result['user_id'])
        fields, image_file = images.parse_multipart_request_data(request)
        restaurant.apply_request_body(EntityBase.request_body_to_db(fields))
        restaurant._validate_request_fields()

        if image_file is not None:
            restaurant.image_url = images.upload_image(image_file)

        restaurant._update_db_record()
        restaurant._reload()
        return Response(status_code=http200, body=restaurant._to_ui())

    def _validate_request_fields(self):
        """
        Checks the owner's input before anything is uploaded or stored
        """
        item = self._to_dict()
        self._validate_fields(item, {key: self.required_mutable_fields_validation[key] for key in REQUEST_FIELDS
                                     if key in self.required_mutable_fields_validation})
        self._validate_fields(item, self.optional_fields_validation, skip_empty=True)

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(restaurant_id=self.id_)

    def _to_dict(self) -> Dict:
        return {
            'id_': self.id_,
            'user_id': self.user_id,
            'restaurant_name': self.restaurant_name,
            'address': self.address,
            'city': self.city,
            'country': self.country,
            'delivery_price': self.delivery_price,
            'estimated_delivery_time': self.estimated_delivery_time,
            'cuisines': self.cuisines,
            'menu_items': self.menu_items,
            'image_url': self.image_url,
            'date_created': self.date_created,
            'last_updated': self.last_updated
        }

    def _to_ui(self) -> Dict:
        item = EntityBase._to_ui(self)
        item['cuisines'] = item.get('cuisines') or []
        item['menuItems'] = item.get('menuItems') or []
        return item
