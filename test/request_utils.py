import json
from typing import Dict, List, Optional, Tuple

from requests_toolbelt.multipart.encoder import MultipartEncoder

from chalicelib.utils import db

JPEG_IMAGE = ('food.jpg', b'\xff\xd8\xff\xe0 not really a jpeg', 'image/jpeg')
PNG_IMAGE = ('food.png', b'\x89PNG\r\n\x1a\n not really a png', 'image/png')


def auth_headers(token: Optional[str]) -> Dict:
    return {'Authorization': f'Bearer {token}'} if token else {}


def make_request(client, endpoint: str = '/', method: str = 'GET', json_body=None, token=None):
    return client.http.request(
        method=method,
        path=endpoint,
        headers={'Content-Type': 'application/json', **auth_headers(token)},
        body=json.dumps(json_body).encode('utf-8') if json_body is not None else b''
    )


def make_multipart_request(client, endpoint: str, method: str = 'POST', fields: List[Tuple] = (),
                           image_file: Optional[Tuple] = None, token=None):
    parts = list(fields)
    if image_file is not None:
        parts.append(('imageFile', image_file))
    multipart_data = MultipartEncoder(fields=parts)
    return client.http.request(
        method=method,
        path=endpoint,
        headers={'Content-Type': multipart_data.content_type, **auth_headers(token)},
        body=multipart_data.to_string()
    )


def response_body(response):
    return json.loads(response.body) if response.body else None


def restaurant_form(cuisines=('Thai', 'Vegan'), menu_items=(('Pad Thai', '8.50'), ('Spring rolls', '4')),
                    **overrides) -> List[Tuple[str, str]]:
    scalar_fields = {
        'restaurantName': 'Golden Lotus',
        'address': '12 Baker Street',
        'city': 'London',
        'country': 'United Kingdom',
        'deliveryPrice': '5.50',
        'estimatedDeliveryTime': '30',
        **overrides
    }
    fields = [(key, value) for key, value in scalar_fields.items() if value is not None]
    fields += [(f'cuisines[{index}]', cuisine) for index, cuisine in enumerate(cuisines)]
    for index, (name, price) in enumerate(menu_items):
        fields += [(f'menuItems[{index}][name]', name), (f'menuItems[{index}][price]', price)]
    return fields


def create_user(client, auth0_id: str, **profile) -> Dict:
    response = make_request(client, endpoint='/api/my/user', method='POST',
                            json_body={'auth0Id': auth0_id, 'email': f'{auth0_id}@test.com', **profile})
    assert response.status_code == 201
    return response_body(response)


def create_restaurant(client, token: str, **overrides) -> Dict:
    response = make_multipart_request(client, '/api/my/restaurant', fields=restaurant_form(**overrides),
                                      image_file=JPEG_IMAGE, token=token)
    assert response.status_code == 201
    return response_body(response)


def put_order(restaurant_id: str, user_id: str, order_id: str, status: str = 'placed') -> Dict:
    order_record = {
        'partkey': 'orders',
        'sortkey': order_id,
        'record_type': 'order',
        'id_': order_id,
        'restaurant_id': restaurant_id,
        'user_id': user_id,
        'delivery_details': {
            'email': 'hungry@test.com',
            'name': 'Hungry Customer',
            'address_line1': '1 Main Road',
            'city': 'London'
        },
        'cart_items': [{'menu_item_id': '0', 'name': 'Pad Thai', 'quantity': 2}],
        'total_amount': 2250,
        'status': status,
        'created_at': '2024-05-01T12:00:00.000+00:00'
    }
    db.put_db_record(order_record)
    return order_record


def get_order_record(order_id: str) -> Dict:
    return db.get_db_item('orders', order_id)
