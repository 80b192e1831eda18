import json
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple


def replace_dict_key(item, orig_key, new_key):
    if orig_key in item:
        if new_key not in item:
            item[new_key] = item[orig_key]
        del item[orig_key]


def substitute_keys(dict_to_process: dict, base_keys: dict, opt_dict=None, nested: bool = False):
    if opt_dict is None:
        opt_dict = {}
    all_keys = {**base_keys, **opt_dict}
    for key, val in all_keys.items():
        if val:
            replace_dict_key(dict_to_process, key, val)
        elif key in dict_to_process.keys():
            dict_to_process.pop(key, None)
    if nested:
        for value in dict_to_process.values():
            for sub_item in (value if isinstance(value, list) else [value]):
                if isinstance(sub_item, dict):
                    substitute_keys(sub_item, base_keys, opt_dict, nested=True)


def parse_raw_body(chalice_request):
    request_raw_body = chalice_request.raw_body
    if request_raw_body:
        return fix_values_from_ui(item=json.loads(request_raw_body))
    else:
        return {}


def fix_values_from_ui(item):
    """
    Remove keys with None values and transform float to Decimal
    """
    item = cleanup_dict(item, [None])
    result = json.dumps(item)
    return json.loads(result, parse_float=Decimal)


def cleanup_dict(item: dict, list_of_values: list):
    """ Remove None fields in dict with. Supports one nesting.  """

    def sub_clean(sub_item):
        return {
            key: value
            for key, value in sub_item.items()
            if value not in list_of_values
        }

    clean = {}
    for k, v in item.items():
        if isinstance(v, dict):
            nested = sub_clean(v)
            if len(nested.keys()) > 0:
                clean[k] = nested
        elif v not in list_of_values:
            clean[k] = v
    return clean


def to_decimal(value: Any, exp: str = '1.00') -> Optional[Decimal]:
    """
    Form fields arrive as strings, JSON numbers as int/float/Decimal.
    Returns None for anything that is not a finite number.
    """
    if isinstance(value, bool) or value is None or value == '':
        return None
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return None
    if not result.is_finite():
        return None
    return result.quantize(Decimal(exp))


def to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value.strip())
    return None


FORM_KEY_SEGMENT = re.compile(r'\[([^\]]*)\]')


def fold_form_fields(fields: List[Tuple[str, Any]]) -> Dict:
    """
    Folds bracket-notation form fields into nested values:
    cuisines[0]=Thai, menuItems[0][name]=Pad Thai -> {'cuisines': ['Thai'], 'menuItems': [{'name': 'Pad Thai'}]}
    A plain key sent several times becomes a list.
    """
    folded = {}
    for key, value in fields:
        name, bracket, rest = key.partition('[')
        path = [name, *FORM_KEY_SEGMENT.findall(bracket + rest)]
        node = folded
        for segment in path[:-1]:
            node = node.setdefault(segment or str(len(node)), {})
        last = path[-1] or str(len(node))
        if last in node:
            previous = node[last]
            node[last] = [*previous, value] if isinstance(previous, list) else [previous, value]
        else:
            node[last] = value
    return _indexed_to_lists(folded)


def _indexed_to_lists(node):
    if not isinstance(node, dict):
        return node
    node = {key: _indexed_to_lists(value) for key, value in node.items()}
    if node and all(key.isdigit() for key in node):
        return [node[key] for key in sorted(node, key=int)]
    return node


def get_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds')
