"""
novastore/catalog/store.py
--------------------------
Authoritative product collection.

Products are handled as plain dicts in export field order:
    {'id', 'name', 'description', 'price', 'stock', 'categoryId', 'imageUrl'}

The collection is either absent (no catalog_state marker → seed on first
use) or fully valid. Ids are max(existing) + 1 and are never reused while
the highest id survives.
"""
import json
from typing import List, Optional

from flask import current_app
from sqlalchemy import func

from novastore import db
from novastore.catalog.models import Product
from novastore.catalog.seeding import (
    SeedLoadError, is_seeded, load_seed_document, mark_seeded,
)
from novastore.catalog.validators import round_price, validate_products_payload

COLLECTION = 'products'


def _stored_products() -> Optional[List[dict]]:
    """
    The persisted collection, or None when it is absent.
    A stored collection that no longer validates counts as absent.
    """
    if not is_seeded(COLLECTION):
        return None
    rows = Product.query.order_by(Product.position.asc()).all()
    validation = validate_products_payload([row.to_dict() for row in rows])
    if not validation['valid']:
        current_app.logger.warning(
            f"Stored product collection failed validation ({validation['errors']}); treating as absent."
        )
        return None
    return validation['data']


def _fetch_seed_products() -> List[dict]:
    payload = load_seed_document(COLLECTION)
    validation = validate_products_payload(payload)
    if not validation['valid']:
        raise SeedLoadError(f"Invalid products seed file: {validation['errors']}")
    return validation['data']


def ensure_seeded() -> List[dict]:
    """
    Return the stored collection, seeding it from the seed document first
    if it is absent. Raises SeedLoadError when seeding is needed and fails.
    """
    existing = _stored_products()
    if existing is not None:
        return existing

    seeded = _fetch_seed_products()
    replace_all(seeded)
    current_app.logger.info(f"Product collection seeded with {len(seeded)} products.")
    return seeded


def list_products() -> List[dict]:
    """Products in insertion order; empty when the collection is absent."""
    return _stored_products() or []


def get_product(product_id: int) -> Optional[dict]:
    product = db.session.get(Product, product_id)
    return product.to_dict() if product is not None else None


def _apply_draft(product: Product, draft: dict) -> None:
    product.name        = draft['name'].strip()
    product.description = (draft.get('description') or '').strip()
    product.price       = round_price(draft['price'])
    product.stock       = int(draft['stock'])
    product.category_id = int(draft['categoryId'])
    product.image_url   = (draft.get('imageUrl') or '').strip()


def _next_value(column) -> int:
    return (db.session.query(func.max(column)).scalar() or 0) + 1


def create_product(draft: dict) -> dict:
    """Append a product with id = max(existing ids, 0) + 1 and return it."""
    product = Product(id=_next_value(Product.id), position=_next_value(Product.position))
    _apply_draft(product, draft)
    db.session.add(product)
    mark_seeded(COLLECTION)
    db.session.commit()
    return product.to_dict()


def update_product(product_id: int, draft: dict) -> bool:
    """Replace every editable field of an existing product. False if the id is unknown."""
    product = db.session.get(Product, product_id)
    if product is None:
        return False
    _apply_draft(product, draft)
    db.session.commit()
    return True


def delete_product(product_id: int) -> bool:
    """Remove a product. False (and no change) if the id is unknown."""
    product = db.session.get(Product, product_id)
    if product is None:
        return False
    db.session.delete(product)
    db.session.commit()
    return True


def replace_all(products: List[dict]) -> None:
    """
    Overwrite the whole collection. Performs no validation: callers must
    have run validate_products_payload and checked `valid` first.
    """
    Product.query.delete()
    for position, item in enumerate(products, start=1):
        db.session.add(Product(
            id=item['id'],
            name=item['name'],
            description=item.get('description', ''),
            price=item['price'],
            stock=item['stock'],
            category_id=item['categoryId'],
            image_url=item.get('imageUrl', ''),
            position=position,
        ))
    mark_seeded(COLLECTION)
    db.session.commit()


def export_json(products: List[dict]) -> str:
    """Pretty-printed JSON array, 2-space indent, export field order."""
    return json.dumps(products, indent=2, ensure_ascii=False)


# ── listing helpers ───────────────────────────────────────────────

SORTS = {
    'name-asc':   (lambda p: p['name'].lower(), False),
    'price-asc':  (lambda p: p['price'], False),
    'price-desc': (lambda p: p['price'], True),
    'stock-asc':  (lambda p: p['stock'], False),
    'stock-desc': (lambda p: p['stock'], True),
}
DEFAULT_SORT = 'name-asc'


def filter_products(products: List[dict], search: str = '', category='all', sort: str = DEFAULT_SORT) -> List[dict]:
    """Name search (case-insensitive), optional category filter, then sort."""
    needle = (search or '').strip().lower()
    result = [p for p in products if needle in p['name'].lower()]

    if category not in (None, '', 'all'):
        try:
            category_id = int(category)
        except (TypeError, ValueError):
            category_id = None
        result = [p for p in result if p['categoryId'] == category_id]

    key, reverse = SORTS.get(sort, SORTS[DEFAULT_SORT])
    return sorted(result, key=key, reverse=reverse)
