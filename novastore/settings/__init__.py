"""
novastore/settings/__init__.py
------------------------------
Profile settings & UI preferences blueprint.
URL prefix: /settings
"""
from flask import Blueprint

settings = Blueprint('settings', __name__)

from novastore.settings import routes  # noqa: F401, E402
from novastore.settings import models  # noqa: F401, E402  — registers ProfileSettings with SQLAlchemy
