"""
Key translation between UI (camelCase JSON) and DB (snake_case attributes).
A key mapped to None is dropped.
"""

to_db = {
    'id': 'id_',
    'auth0Id': 'auth0_id',
    'addressLine1': 'address_line1',
    'restaurantName': 'restaurant_name',
    'deliveryPrice': 'delivery_price',
    'estimatedDeliveryTime': 'estimated_delivery_time',
    'menuItems': 'menu_items',
    'imageUrl': 'image_url',
    'lastUpdated': 'last_updated',
    'deliveryDetails': 'delivery_details',
    'cartItems': 'cart_items',
    'menuItemId': 'menu_item_id',
    'totalAmount': 'total_amount',
    'createdAt': 'created_at',
    'dateCreated': 'date_created',
    'dateUpdated': 'date_updated',
    'user': 'user_id',
    'restaurant': 'restaurant_id',
}

from_db = {
    'partkey': None,
    'sortkey': None,
    'record_type': None,
    **{value: key for key, value in to_db.items()}
}
