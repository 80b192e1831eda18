import functools
import os
import time
from random import uniform

import boto3 as boto3
from botocore.exceptions import ClientError

from chalicelib.utils import exceptions
from chalicelib.utils.boto_clients import aws_config_ddb
from chalicelib.utils.logger import logger, log_exception

# For safe db operations
RETRY_EXCEPTIONS = ('ProvisionedThroughputExceededException', 'ThrottlingException')
need_return_capacity = ('put_item', 'get_item', 'update_item', 'delete_item')

_DB = None


def exp_db_backoff(func):
    """
        should be used for any atomic
        get/put item in the code
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f'{func.__name__}:: args={args}, kwargs={kwargs}')
        max_retries = 15
        timeout_seed = uniform(0.1, 0.99)

        if func.__name__ not in need_return_capacity:
            raise RuntimeError("This decorator only for DynamoDB methods")
        kwargs.update({'ReturnConsumedCapacity': 'TOTAL'})

        for retries in range(max_retries):
            try:
                result = func(*args, **kwargs)
                logger.info(f'{func.__name__}:: SUCCESS')
                return result

            except ClientError as e:
                if e.response.get('Error', {}).get('Code') not in RETRY_EXCEPTIONS:
                    log_exception(e, msg=f'Got exception while trying to {func.__name__}: ')
                    raise
                logger.warning(f'{func.__name__}:: throttled, {retries=}')
                time.sleep(timeout_seed * 2 ** min(retries, 5))

        raise exceptions.NumberOfRetriesExceeded(
            f"MaxNumber={max_retries} of DB retries has exceeded"
        )

    return wrapper


def get_table(gl_table: boto3.session.Session.resource, table_name: str) -> boto3.session.Session.resource:
    if gl_table is None:
        if os.environ.get('ENDPOINT_URL'):
            gl_table = boto3.resource('dynamodb', endpoint_url=os.environ.get('ENDPOINT_URL')).Table(table_name)
        else:
            gl_table = boto3.resource('dynamodb', config=aws_config_ddb).Table(table_name)

        gl_table.put_item = exp_db_backoff(gl_table.put_item)
        gl_table.get_item = exp_db_backoff(gl_table.get_item)
        gl_table.update_item = exp_db_backoff(gl_table.update_item)
        gl_table.delete_item = exp_db_backoff(gl_table.delete_item)

    return gl_table


def get_gen_table():
    global _DB
    _DB = get_table(_DB, os.environ.get('GEN_TABLE_NAME'))
    return _DB


def put_db_record(item: dict, table=get_gen_table):
    table().put_item(Item=item)


def update_db_record(key: dict, update_body: dict, allowed_attrs_to_update: list,
                     allowed_attrs_to_delete: list, table=get_gen_table):
    """
    One update_item call carries both the SET and the REMOVE part
    """
    set_expr, set_attr_names, expr_attr_values, remove_expr, remove_attr_names = generate_update_expression(
        update_body=update_body,
        allowed_attrs_to_update=allowed_attrs_to_update,
        allowed_attrs_to_delete=allowed_attrs_to_delete
    )
    update_expr = ' '.join(expr for expr in (set_expr, remove_expr) if expr)
    if not update_expr:
        return None

    update_item_dict = {
        "Key": key,
        "ReturnValues": "UPDATED_NEW",
        "UpdateExpression": update_expr,
        "ExpressionAttributeNames": {**(set_attr_names or {}), **(remove_attr_names or {})}
    }
    if expr_attr_values:
        update_item_dict["ExpressionAttributeValues"] = expr_attr_values
    return table().update_item(**update_item_dict)


def generate_update_expression(update_body: dict, allowed_attrs_to_update: list, allowed_attrs_to_delete: list):
    """
    Generate expressions to update and delete attributes.
    A field sent as None (or empty) is removed when deletable, otherwise skipped.
    Fields missing from update_body are left untouched.
    Attribute names always go through #placeholders, so reserved words (name, status...) are fine.
    """
    set_attr_names, expr_attr_values, remove_attr_names = {}, {}, {}
    set_expr = 'SET '
    remove_expr = 'REMOVE '
    return_value = [None, None, None, None, None]
    for field in allowed_attrs_to_update:
        if field not in update_body:
            continue
        field_value = update_body[field]
        if field_value in [None, '', [], {}] and field in allowed_attrs_to_delete:
            remove_attr_names[f'#{field}'] = field
            remove_expr += f'#{field}, '
        elif field_value is not None:
            set_attr_names[f'#{field}'] = field
            expr_attr_values[f':{field}'] = field_value
            set_expr += f'#{field}=:{field}, '

    if set_expr != 'SET ':
        return_value[0] = set_expr[:-2]
        return_value[1] = set_attr_names
        return_value[2] = expr_attr_values

    if remove_expr != 'REMOVE ':
        return_value[3] = remove_expr[:-2]
        return_value[4] = remove_attr_names

    return return_value


def get_db_item(partkey, sortkey, table=get_gen_table):
    result = table().get_item(
        Key={
            'partkey': partkey,
            'sortkey': sortkey
        }
    )

    if 'Item' in result:
        return result['Item']
    else:
        logger.warning(f"get_db_item ::: record partkey={partkey} sortkey={sortkey} not found")
        raise exceptions.RecordNotFound(f'record partkey={partkey} sortkey={sortkey} not found')


def query_items_paginated(key_condition_expression, filter_expression=None, table=get_gen_table, start_key=None):
    kwargs = {'KeyConditionExpression': key_condition_expression}
    if filter_expression:
        kwargs.update({'FilterExpression': filter_expression})

    if start_key:
        kwargs.update({'ExclusiveStartKey': start_key})

    resp = table().query(**kwargs)
    return resp['Items'], resp.get('LastEvaluatedKey')


def query_items_paged(key_condition_expression, filter_expression=None, table=get_gen_table):
    """ This method shall be used whenever you think the query will
        return more than 1mb of data at once"""
    all_items = []
    items, last_evaluated_key = query_items_paginated(
        key_condition_expression,
        filter_expression=filter_expression,
        table=table
    )
    all_items.extend(items)

    while last_evaluated_key is not None:
        items, last_evaluated_key = query_items_paginated(
            key_condition_expression,
            filter_expression=filter_expression,
            table=table,
            start_key=last_evaluated_key
        )
        all_items.extend(items)

    return all_items
