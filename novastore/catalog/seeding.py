"""
novastore/catalog/seeding.py
----------------------------
Seed documents and the "has this collection been seeded" marker.
"""
import json
import os

from flask import current_app

from novastore import db
from novastore.catalog.models import CatalogState, Category, Product

SEED_FILES = {
    'categories': 'categories.seed.json',
    'products':   'products.seed.json',
}

_MODELS = {
    'categories': Category,
    'products':   Product,
}


class SeedLoadError(Exception):
    """A seed document is missing, unreadable, or fails validation."""


def load_seed_document(collection: str):
    """Read and parse the seed document for a collection. Raises SeedLoadError."""
    path = os.path.join(current_app.config['SEED_DIR'], SEED_FILES[collection])
    try:
        with open(path, encoding='utf-8') as fh:
            return json.load(fh)
    except OSError as e:
        raise SeedLoadError(f"Failed to load {collection} seed: {e}") from e
    except ValueError as e:
        raise SeedLoadError(f"Invalid {collection} seed file: {e}") from e


def is_seeded(collection: str) -> bool:
    return db.session.get(CatalogState, collection) is not None


def mark_seeded(collection: str) -> None:
    """Flag the collection as present. Caller commits."""
    if db.session.get(CatalogState, collection) is None:
        db.session.add(CatalogState(collection=collection))


def reset_collection(collection: str) -> None:
    """Delete a collection's rows and marker so it is absent again."""
    _MODELS[collection].query.delete()
    CatalogState.query.filter_by(collection=collection).delete()
    db.session.commit()
    current_app.logger.info(f"Catalog collection '{collection}' reset.")
