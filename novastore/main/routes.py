"""
novastore/main/routes.py
────────────────────────
Landing redirect, dashboard summary and health check.
"""
from decimal import Decimal

from flask import current_app, g, jsonify, redirect, url_for

from novastore import db
from novastore.main import main
from novastore.auth.decorators import login_required
from novastore.auth.session import current_user
from novastore.catalog import categories as category_store
from novastore.catalog import store as product_store
from novastore.catalog.models import LOW_STOCK_THRESHOLD


@main.route('/')
def index():
    """Signed-in users land on the dashboard, everyone else on login."""
    if current_user() is not None:
        return redirect(url_for('main.dashboard'))
    return redirect(url_for('auth.login'))


@main.route('/dashboard')
@login_required
def dashboard():
    """Catalog KPIs for the header cards."""
    categories = category_store.ensure_seeded()
    products = product_store.ensure_seeded()

    inventory_value = sum(
        (Decimal(str(p['price'])) * p['stock'] for p in products),
        Decimal('0'),
    )
    return jsonify({
        'user': g.user.to_payload(),
        'canManage': g.user.is_admin,
        'productCount': len(products),
        'categoryCount': len(categories),
        'lowStockCount': sum(1 for p in products if p['stock'] <= LOW_STOCK_THRESHOLD),
        'inventoryValue': float(inventory_value.quantize(Decimal('0.01'))),
    })


@main.route('/health')
def health():
    """Health check for load balancers and monitoring."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    status = 'ok'
    details = {}

    try:
        db.session.execute(text('SELECT 1'))
        details['db'] = 'ok'
    except SQLAlchemyError as e:
        status = 'error'
        details['db'] = 'unreachable'
        current_app.logger.error(f"Health check failed (DB): {e}")

    return jsonify({'status': status, 'details': details}), 200 if status == 'ok' else 503
