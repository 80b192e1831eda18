from decimal import Decimal
from typing import Tuple, List, Dict, Optional

from boto3.dynamodb.conditions import Key, Attr
from chalice import Response
from chalice.app import Request

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ORDER_STATUSES
from chalicelib.constants.status_codes import http200
from chalicelib.restaurants import Restaurant
from chalicelib.users import User
from chalicelib.utils import auth as utils_auth, data as utils_data, db as utils_db, app as utils_app, exceptions
from chalicelib.utils.logger import logger


class Order(EntityBase):
    """
    Orders are written by the checkout flow, here they are only listed and moved through ORDER_STATUSES
    """
    pk = keys_structure.orders_pk
    sk = keys_structure.orders_sk

    required_immutable_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'restaurant_id': lambda x: isinstance(x, str),
        'user_id': lambda x: isinstance(x, str),
        'created_at': lambda x: isinstance(x, str)
    }

    required_mutable_fields_validation = {
        'status': lambda x: x in ORDER_STATUSES,
        'date_updated': lambda x: isinstance(x, str)
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        self.restaurant_id: str = kwargs.get('restaurant_id')
        self.user_id: str = kwargs.get('user_id')
        self.delivery_details: Dict = kwargs.get('delivery_details', {})
        self.cart_items: List[Dict] = kwargs.get('cart_items', [])
        self.total_amount: Decimal = kwargs.get('total_amount')
        self.status: str = kwargs.get('status') or ORDER_STATUSES[0]
        self.created_at: str = kwargs.get('created_at') or utils_data.get_timestamp()
        self.date_updated: str = kwargs.get('date_updated') or self.created_at
        self.record_type = 'order'

    @classmethod
    def init_by_id(cls, order_id):
        logger.info("init_by_id ::: started")
        c = cls(order_id)
        try:
            c._reload()
        except exceptions.RecordNotFound as error:
            raise exceptions.RecordNotFound('order not found') from error
        return c

    @staticmethod
    def get_restaurant_db_orders(restaurant_id) -> List[Dict]:
        return utils_db.query_items_paged(
            Key('partkey').eq(keys_structure.orders_pk),
            filter_expression=Attr('restaurant_id').eq(restaurant_id)
        )

    @staticmethod
    @utils_app.request_exception_handler
    @utils_auth.authenticate
    @utils_app.log_start_finish
    def endpoint_get_my_restaurant_orders(request: Request) -> Response:
        restaurant = Restaurant.init_by_user_id(request.auth_result['user_id'])
        restaurant_ui = restaurant._to_ui()
        orders = [Order(**record) for record in Order.get_restaurant_db_orders(restaurant.id_)]

        users: Dict[str, Optional[Dict]] = {}
        for user_id in {order.user_id for order in orders}:
            user = User.find_by_id(user_id) if user_id else None
            users[user_id] = user._to_ui() if user else None

        logger.info(f"endpoint_get_my_restaurant_orders ::: {restaurant.id_=}, returning {len(orders)} orders")
        return Response(
            status_code=http200,
            body=[order.to_ui_expanded(restaurant_ui, users.get(order.user_id)) for order in orders]
        )

    @staticmethod
    @utils_app.request_exception_handler
    @utils_auth.authenticate
    @utils_app.log_start_finish
    def endpoint_update_order_status(request: Request, order_id: str) -> Response:
        order = Order.init_by_id(order_id)

        restaurant = Restaurant.find_by_id(order.restaurant_id)
        if restaurant is None or not restaurant.is_owned_by(request.auth_result['user_id']):
            raise exceptions.AccessDenied(f'{order_id=} does not belong to a restaurant of the user')

        status = utils_data.parse_raw_body(request).get('status')
        if status not in ORDER_STATUSES:
            raise exceptions.ValidationException(f'status must be one of {", ".join(ORDER_STATUSES)}')

        order.status = status
        order._update_db_record()
        logger.info(f"endpoint_update_order_status ::: {order_id=} moved to {status=}")
        return Response(status_code=http200, body=order.to_ui())

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(order_id=self.id_)

    def _to_dict(self) -> Dict:
        return {
            'id_': self.id_,
            'restaurant_id': self.restaurant_id,
            'user_id': self.user_id,
            'delivery_details': self.delivery_details,
            'cart_items': self.cart_items,
            'total_amount': self.total_amount,
            'status': self.status,
            'created_at': self.created_at,
            'date_updated': self.date_updated
        }

    def to_ui(self) -> Dict:
        return self._to_ui()

    def to_ui_expanded(self, restaurant: Dict, user: Optional[Dict]) -> Dict:
        """
        Order with restaurant and user objects in place of their ids, user is None when it no longer exists
        """
        item = self._to_ui()
        item['restaurant'] = restaurant
        item['user'] = user
        return item
