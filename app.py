from chalice import Chalice

from chalicelib import orders, restaurants, users

app = Chalice(app_name='food-ordering-api')

app.api.binary_types.insert(0, 'multipart/form-data')


@app.route('/health-check', methods=['GET'], cors=True)
def health_check():
    return {'health': 'check'}


# USERS
@app.route('/api/my/user', methods=['POST'], cors=True)
def create_current_user():
    """
    identity is self-asserted by the front end right after login, authorization is not needed
    """
    return users.User.endpoint_create_user(app.current_request)


@app.route('/api/my/user', methods=['GET'], cors=True)
def get_current_user():
    return users.User.endpoint_get_user(app.current_request)


@app.route('/api/my/user', methods=['PUT'], cors=True)
def update_current_user():
    return users.User.endpoint_update_user(app.current_request)


# MY RESTAURANT
@app.route('/api/my/restaurant', methods=['GET'], cors=True)
def get_my_restaurant():
    return restaurants.Restaurant.endpoint_get_my_restaurant(app.current_request)


@app.route('/api/my/restaurant', methods=['POST'], content_types=['multipart/form-data'], cors=True)
def create_my_restaurant():
    """
    restaurant owner operation, one restaurant per user
    """
    return restaurants.Restaurant.endpoint_create_my_restaurant(app.current_request)


@app.route('/api/my/restaurant', methods=['PUT'], content_types=['multipart/form-data'], cors=True)
def update_my_restaurant():
    """
    restaurant owner operation, imageFile is optional
    """
    return restaurants.Restaurant.endpoint_update_my_restaurant(app.current_request)


# MY RESTAURANT ORDERS
@app.route('/api/my/restaurant/order', methods=['GET'], cors=True)
def get_my_restaurant_orders():
    return orders.Order.endpoint_get_my_restaurant_orders(app.current_request)


@app.route('/api/my/restaurant/order/{order_id}/status', methods=['PATCH'], cors=True)
def update_order_status(order_id):
    """
    only the owner of the order's restaurant can move the order
    """
    return orders.Order.endpoint_update_order_status(app.current_request, order_id)
