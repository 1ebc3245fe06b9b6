"""
novastore/catalog/categories.py
-------------------------------
Category collection: seeded once, then grown by upsert-by-name.
"""
from typing import List, Optional

from flask import current_app
from sqlalchemy import func

from novastore import db
from novastore.catalog.models import Category
from novastore.catalog.seeding import (
    SeedLoadError, is_seeded, load_seed_document, mark_seeded,
)
from novastore.catalog.validators import validate_category_payload

COLLECTION = 'categories'


def _stored_categories() -> Optional[List[dict]]:
    if not is_seeded(COLLECTION):
        return None
    rows = Category.query.order_by(Category.position.asc()).all()
    payload = [row.to_dict() for row in rows]
    if not validate_category_payload(payload):
        current_app.logger.warning("Stored category collection failed validation; treating as absent.")
        return None
    return payload


def ensure_seeded() -> List[dict]:
    """Return stored categories, seeding them first if absent. Raises SeedLoadError."""
    existing = _stored_categories()
    if existing is not None:
        return existing

    payload = load_seed_document(COLLECTION)
    if not validate_category_payload(payload):
        raise SeedLoadError("Invalid categories seed file")

    Category.query.delete()
    for position, item in enumerate(payload, start=1):
        db.session.add(Category(id=item['id'], name=item['name'].strip(), position=position))
    mark_seeded(COLLECTION)
    db.session.commit()
    current_app.logger.info(f"Category collection seeded with {len(payload)} categories.")
    return [{'id': item['id'], 'name': item['name'].strip()} for item in payload]


def list_categories() -> List[dict]:
    return _stored_categories() or []


def create_category(name: str) -> Optional[dict]:
    """
    Upsert by case-insensitive name.

    Returns None for a blank name, otherwise
    {'category': {'id', 'name'}, 'created': bool}.
    """
    trimmed = (name or '').strip()
    if not trimmed:
        return None

    existing = Category.query.filter(func.lower(Category.name) == trimmed.lower()).first()
    if existing is not None:
        return {'category': existing.to_dict(), 'created': False}

    next_id = (db.session.query(func.max(Category.id)).scalar() or 0) + 1
    next_position = (db.session.query(func.max(Category.position)).scalar() or 0) + 1
    category = Category(id=next_id, name=trimmed, position=next_position)
    db.session.add(category)
    mark_seeded(COLLECTION)
    db.session.commit()
    current_app.logger.info(f"Category created: {category.name} (id={category.id})")
    return {'category': category.to_dict(), 'created': True}
