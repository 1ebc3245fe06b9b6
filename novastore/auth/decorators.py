"""
novastore/auth/decorators.py
----------------------------
Reusable route-protection decorators.
Usage:
    from novastore.auth.decorators import login_required, admin_required

    @catalog.route('/')
    @login_required
    def index():
        ...

    @catalog.route('/import', methods=['POST'])
    @admin_required
    def import_products():
        ...

The verified SessionUser is available as flask.g.user inside the view.
"""
from functools import wraps
from flask import g

from novastore.auth.models import RoleEnum
from novastore.auth.session import require_user


def login_required(f):
    """
    Redirect to the login page (keeping the requested path as redirectTo)
    if there is no valid session.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        g.user = require_user()
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """
    Allow access only to the admin.
    Implies login_required — unauthenticated users are redirected to login.
    Authenticated viewers receive a 403 Forbidden response.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        g.user = require_user(RoleEnum.admin)
        return f(*args, **kwargs)
    return decorated
