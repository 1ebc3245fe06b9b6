"""
novastore/catalog/__init__.py
-----------------------------
Product & category catalog blueprint.
URL prefix: /products
"""
from flask import Blueprint

catalog = Blueprint('catalog', __name__)

from novastore.catalog import routes  # noqa: F401, E402
from novastore.catalog import models  # noqa: F401, E402  — registers Product/Category with SQLAlchemy
