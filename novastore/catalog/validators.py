"""
novastore/catalog/validators.py
-------------------------------
Pure-Python validation for catalog data.

validate_products_payload  — untrusted JSON (import file, seed document,
                             stored rows) → {valid, errors, problems, data}
validate_category_payload  — same idea for the categories seed
validate_product_form      — create / edit form → {field: message}
"""
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from urllib.parse import urlparse

from novastore.utils.messages import message_for

NAME_MAX_LENGTH = 200
# Column ranges: 64-bit INTEGER ids/stock, Numeric(10, 2) price
MAX_INTEGER = 2 ** 63 - 1
MAX_PRICE = 99_999_999.99
NEW_CATEGORY_VALUE = 'new'


# ── coercion helpers ──────────────────────────────────────────────

def to_number(value) -> float:
    """
    Permissive numeric coercion: ints, floats and numeric strings.
    Anything else (None, bools, blank strings, lists...) becomes NaN.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return math.nan
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def is_whole(value) -> bool:
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def _normalized_number(value):
    """Whole numbers as int, other finite numbers unchanged, NaN/inf as None."""
    if is_whole(value):
        return int(value)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def round_price(value):
    """Two-decimal price as a float; None when the input is not finite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        return float(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # too many digits to quantize
        return None


def is_valid_price(value) -> bool:
    """Judged after rounding: 0.004 rounds to 0.00 and is rejected."""
    rounded = round_price(value)
    return rounded is not None and 0 < rounded <= MAX_PRICE


def is_whole_in_range(value, minimum: int) -> bool:
    return is_whole(value) and minimum <= value <= MAX_INTEGER


# ── import / seed payloads ────────────────────────────────────────

def validate_products_payload(payload) -> dict:
    """
    Validate a JSON value that is about to replace the product collection.

    Errors accumulate across every element instead of stopping at the
    first one. `data` holds one normalized product per input object even
    when that object has errors; only trust it when `valid` is True.

    Returns:
        {'valid': bool,
         'errors': [error kind, ...]            — unique, first-seen order
         'problems': [{'index', 'error'}, ...]  — every flagged element
         'data': [product dict, ...]}
    """
    if not isinstance(payload, list):
        return {
            'valid': False,
            'errors': ['not_an_array'],
            'problems': [],
            'data': [],
        }

    errors = []
    problems = []
    flagged = set()
    first_index_by_id = {}
    data = []

    def flag(index, kind):
        if kind not in errors:
            errors.append(kind)
        if (index, kind) not in flagged:
            flagged.add((index, kind))
            problems.append({'index': index, 'error': kind})

    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            flag(index, 'not_an_object')
            continue

        raw_id = to_number(item.get('id'))
        price = to_number(item.get('price'))
        stock = to_number(item.get('stock'))
        category_id = to_number(item.get('categoryId'))
        name = item['name'].strip() if isinstance(item.get('name'), str) else ''

        # ── id ────────────────────────────────────────────────────
        if not is_whole_in_range(raw_id, 1):
            flag(index, 'invalid_id')
        product_id = _normalized_number(raw_id)
        if product_id is not None:
            if product_id in first_index_by_id:
                flag(first_index_by_id[product_id], 'duplicate_id')
                flag(index, 'duplicate_id')
            else:
                first_index_by_id[product_id] = index

        # ── name ──────────────────────────────────────────────────
        if not name:
            flag(index, 'invalid_name')

        # ── price ─────────────────────────────────────────────────
        if not is_valid_price(price):
            flag(index, 'invalid_price')

        # ── stock ─────────────────────────────────────────────────
        if not is_whole_in_range(stock, 0):
            flag(index, 'invalid_stock')

        # ── categoryId (existence is not cross-checked) ───────────
        if not is_whole_in_range(category_id, 1):
            flag(index, 'invalid_category')

        # ── imageUrl ──────────────────────────────────────────────
        if 'imageUrl' in item and not isinstance(item['imageUrl'], str):
            flag(index, 'invalid_image_url')

        description = item.get('description')
        image_url = item.get('imageUrl')
        data.append({
            'id':          product_id,
            'name':        name,
            'description': description.strip() if isinstance(description, str) else '',
            'price':       round_price(price),
            'stock':       _normalized_number(stock),
            'categoryId':  _normalized_number(category_id),
            'imageUrl':    image_url if isinstance(image_url, str) else '',
        })

    return {
        'valid': not errors,
        'errors': errors,
        'problems': problems,
        'data': data,
    }


def is_category(value) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get('id'), int)
        and not isinstance(value.get('id'), bool)
        and value['id'] > 0
        and isinstance(value.get('name'), str)
        and bool(value['name'].strip())
    )


def validate_category_payload(payload) -> bool:
    """A categories collection is valid only if every entry is a category and ids are unique."""
    if not isinstance(payload, list) or not all(is_category(item) for item in payload):
        return False
    ids = [item['id'] for item in payload]
    return len(ids) == len(set(ids))


# ── product form ──────────────────────────────────────────────────

def _text(form_data: dict, key: str) -> str:
    value = form_data.get(key)
    if value is None:
        return ''
    return str(value).strip()


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def validate_product_form(form_data: dict) -> dict:
    """
    Validate create / edit product data (form post or JSON body).

    Returns:
        dict of {field_name: error_message} — empty if all valid.
    """
    errors = {}

    # ── name ─────────────────────────────────────────────────────
    name = _text(form_data, 'name')
    if not name:
        errors['name'] = message_for('name_required')
    elif len(name) > NAME_MAX_LENGTH:
        errors['name'] = message_for('name_too_long')

    # ── price ─────────────────────────────────────────────────────
    price = to_number(form_data.get('price'))
    if not is_valid_price(price):
        errors['price'] = message_for('price_positive')

    # ── stock ─────────────────────────────────────────────────────
    stock = to_number(form_data.get('stock', 0))
    if not is_whole_in_range(stock, 0):
        errors['stock'] = message_for('stock_non_negative')

    # ── category: existing id, or a new name to upsert ────────────
    new_category = _text(form_data, 'newCategoryName')
    raw_category = form_data.get('categoryId')
    if _text(form_data, 'categoryId') == NEW_CATEGORY_VALUE or (new_category and not raw_category):
        if not new_category:
            errors['newCategoryName'] = message_for('new_category_required')
    else:
        category_id = to_number(raw_category)
        if not is_whole_in_range(category_id, 1):
            errors['categoryId'] = message_for('category_required')

    # ── imageUrl ──────────────────────────────────────────────────
    image_url = _text(form_data, 'imageUrl')
    if image_url and not _is_http_url(image_url):
        errors['imageUrl'] = message_for('image_url_invalid')

    return errors


def parse_product_form(form_data: dict) -> dict:
    """
    Convert validated form values to a product draft.
    Call only after validate_product_form returns no errors.
    'categoryId' is None when a new category must be created first.
    """
    new_category = _text(form_data, 'newCategoryName')
    raw_category = form_data.get('categoryId')
    wants_new = _text(form_data, 'categoryId') == NEW_CATEGORY_VALUE or (new_category and not raw_category)
    return {
        'name':            _text(form_data, 'name'),
        'description':     _text(form_data, 'description'),
        'price':           float(to_number(form_data.get('price'))),
        'stock':           int(to_number(form_data.get('stock', 0))),
        'categoryId':      None if wants_new else int(to_number(raw_category)),
        'newCategoryName': new_category if wants_new else '',
        'imageUrl':        _text(form_data, 'imageUrl'),
    }
