import json

from flask import Response, current_app, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from novastore import db
from novastore.auth.decorators import login_required, admin_required
from novastore.catalog import catalog
from novastore.catalog import categories as category_store
from novastore.catalog import store as product_store
from novastore.catalog.seeding import SeedLoadError
from novastore.catalog.validators import (
    MAX_INTEGER, validate_product_form, parse_product_form, validate_products_payload,
)
from novastore.utils.messages import error_body

EXPORT_FILENAME = 'products.json'
# Ids outside the column range fall through to the JSON 404
PRODUCT_URL = f'/<int(max={MAX_INTEGER}):product_id>'


@catalog.app_errorhandler(SeedLoadError)
def seed_load_failure(e):
    current_app.logger.error(f"Catalog seed failed: {e}")
    return jsonify(error_body('seed_load_failure')), 503


def _request_data() -> dict:
    """Form post or JSON body, as a plain dict."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict()


def _draft_from_request():
    """
    Validate the submitted product and resolve its category.
    Returns (draft, None) or (None, error_response).
    """
    form_data = _request_data()
    errors = validate_product_form(form_data)
    if errors:
        return None, (jsonify(error_body('validation_failed', fields=errors)), 400)

    draft = parse_product_form(form_data)
    if draft['categoryId'] is None:
        category_store.ensure_seeded()
        result = category_store.create_category(draft['newCategoryName'])
        draft['categoryId'] = result['category']['id']
    return draft, None


# ── LIST ──────────────────────────────────────────────────────────────────────

@catalog.route('/')
@login_required
def index():
    """List products with optional ?q= search, ?category= filter and ?sort= order."""
    category_store.ensure_seeded()
    products = product_store.ensure_seeded()
    filtered = product_store.filter_products(
        products,
        search=request.args.get('q', ''),
        category=request.args.get('category', 'all'),
        sort=request.args.get('sort', product_store.DEFAULT_SORT),
    )
    return jsonify({
        'products': filtered,
        'total': len(products),
        'canManage': g.user.is_admin,
    })


# ── VIEW ──────────────────────────────────────────────────────────────────────

@catalog.route(PRODUCT_URL)
@login_required
def view(product_id):
    product_store.ensure_seeded()
    product = product_store.get_product(product_id)
    if product is None:
        return jsonify(error_body('not_found')), 404
    return jsonify(product)


# ── CREATE ────────────────────────────────────────────────────────────────────

@catalog.route('/', methods=['POST'])
@admin_required
def create():
    product_store.ensure_seeded()
    draft, error = _draft_from_request()
    if error:
        return error

    product = product_store.create_product(draft)
    current_app.logger.info(f"Admin created product: {product['name']} (id={product['id']})")
    return jsonify(product), 201


# ── EDIT ──────────────────────────────────────────────────────────────────────

@catalog.route(PRODUCT_URL, methods=['PUT', 'POST'])
@admin_required
def edit(product_id):
    product_store.ensure_seeded()
    if product_store.get_product(product_id) is None:
        return jsonify(error_body('not_found')), 404

    draft, error = _draft_from_request()
    if error:
        return error

    if not product_store.update_product(product_id, draft):
        return jsonify(error_body('not_found')), 404

    current_app.logger.info(f"Admin updated product id={product_id}")
    return jsonify(product_store.get_product(product_id))


# ── DELETE ────────────────────────────────────────────────────────────────────

@catalog.route(PRODUCT_URL, methods=['DELETE'])
@catalog.route(PRODUCT_URL + '/delete', methods=['POST'])
@admin_required
def delete(product_id):
    product_store.ensure_seeded()
    if not product_store.delete_product(product_id):
        return jsonify(error_body('not_found')), 404

    current_app.logger.info(f"Admin deleted product id={product_id}")
    return '', 204


# ── EXPORT / IMPORT ───────────────────────────────────────────────────────────

@catalog.route('/export')
@login_required
def export():
    """Download the whole collection as products.json."""
    body = product_store.export_json(product_store.ensure_seeded())
    return Response(
        body,
        mimetype='application/json',
        headers={'Content-Disposition': f'attachment; filename={EXPORT_FILENAME}'},
    )


@catalog.route('/import', methods=['POST'])
@admin_required
def import_products():
    """
    Replace the collection from an uploaded .json file ('file' field) or a
    raw JSON body. Nothing is written unless the whole payload validates.
    """
    upload = request.files.get('file')
    raw = upload.read() if upload is not None else request.get_data()
    try:
        payload = json.loads(raw)
    except ValueError:
        current_app.logger.warning("Import rejected: body is not valid JSON.")
        return jsonify(error_body('invalid_json')), 400

    validation = validate_products_payload(payload)
    if not validation['valid']:
        current_app.logger.warning(f"Import rejected: {validation['errors']}")
        return jsonify(error_body(
            validation['errors'][0],
            errors=validation['errors'],
            problems=validation['problems'],
        )), 400

    try:
        product_store.replace_all(validation['data'])
    except (SQLAlchemyError, OverflowError) as exc:
        db.session.rollback()
        current_app.logger.error(f"Import rollback: {exc}")
        return jsonify(error_body('import_failed')), 500

    current_app.logger.info(f"Admin imported {len(validation['data'])} products.")
    return jsonify({'imported': len(validation['data'])})


# ── CATEGORIES ────────────────────────────────────────────────────────────────

@catalog.route('/categories')
@login_required
def list_categories():
    return jsonify(category_store.ensure_seeded())


@catalog.route('/categories', methods=['POST'])
@admin_required
def create_category():
    category_store.ensure_seeded()
    result = category_store.create_category(str(_request_data().get('name') or ''))
    if result is None:
        return jsonify(error_body('category_name_required')), 400
    return jsonify(result), 201 if result['created'] else 200
