users_pk = 'users'
users_sk = '{user_id}'

restaurants_pk = 'restaurants'
restaurants_sk = '{restaurant_id}'

orders_pk = 'orders'
orders_sk = '{order_id}'
