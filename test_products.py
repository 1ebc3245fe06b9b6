"""
test_products.py — product store, category upsert and catalog routes.

Run: pytest test_products.py -v
"""
import io
import json

import pytest

from novastore import create_app, db
from novastore.catalog import categories as category_store
from novastore.catalog import store as product_store
from novastore.catalog.models import Product
from novastore.catalog.seeding import SeedLoadError, is_seeded, reset_collection

DRAFT = {
    'name': '  Desk Lamp ',
    'description': ' LED, dimmable ',
    'price': 24.999,
    'stock': 8,
    'categoryId': 2,
    'imageUrl': ' https://example.com/lamp.png ',
}


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(client):
    resp = client.post('/auth/login', data={'email': 'admin@novastore.com', 'password': 'admin123'})
    assert resp.status_code == 302, "Login failed"
    return client


@pytest.fixture
def viewer(client):
    resp = client.post('/auth/signup', data={
        'email': 'viewer@example.com', 'password': 'secret1', 'confirmPassword': 'secret1',
    })
    assert resp.status_code == 302, "Signup failed"
    return client


def write_seed(tmp_path, products, categories=None):
    (tmp_path / 'products.seed.json').write_text(json.dumps(products), encoding='utf-8')
    (tmp_path / 'categories.seed.json').write_text(
        json.dumps(categories if categories is not None else [{'id': 1, 'name': 'Misc'}]),
        encoding='utf-8',
    )
    return str(tmp_path)


# ── Seeding ───────────────────────────────────────────────────────────────────

def test_ensure_seeded_loads_seed_once(app, tmp_path):
    seeded = product_store.ensure_seeded()
    assert len(seeded) == 6
    assert is_seeded(product_store.COLLECTION)

    # Seed document is never consulted again once the collection exists
    app.config['SEED_DIR'] = str(tmp_path / 'missing')
    assert product_store.ensure_seeded() == seeded


def test_missing_seed_file_is_a_load_error(app, tmp_path):
    app.config['SEED_DIR'] = str(tmp_path)
    with pytest.raises(SeedLoadError):
        product_store.ensure_seeded()
    assert not is_seeded(product_store.COLLECTION)


def test_invalid_seed_file_is_a_load_error(app, tmp_path):
    app.config['SEED_DIR'] = write_seed(tmp_path, [{'id': 1, 'name': '', 'price': 1, 'stock': 1, 'categoryId': 1}])
    with pytest.raises(SeedLoadError):
        product_store.ensure_seeded()
    assert Product.query.count() == 0


def test_seed_failure_surfaces_as_503(admin, app, tmp_path):
    app.config['SEED_DIR'] = str(tmp_path)
    resp = admin.get('/products/')
    assert resp.status_code == 503
    assert resp.get_json()['error'] == 'seed_load_failure'


def test_emptied_collection_is_not_reseeded(app):
    for product in product_store.ensure_seeded():
        assert product_store.delete_product(product['id'])
    assert product_store.ensure_seeded() == []


def test_reset_collection_triggers_reseed(app):
    product_store.ensure_seeded()
    product_store.delete_product(1)
    reset_collection(product_store.COLLECTION)
    assert len(product_store.ensure_seeded()) == 6


def test_corrupt_stored_collection_is_reseeded(app):
    product_store.ensure_seeded()
    db.session.get(Product, 1).name = '   '
    db.session.commit()
    assert product_store.list_products() == []
    reseeded = product_store.ensure_seeded()
    assert reseeded[0]['name'] == 'Wireless Headphones'


# ── CRUD ──────────────────────────────────────────────────────────────────────

def test_create_appends_with_next_id(app):
    before = product_store.ensure_seeded()
    created = product_store.create_product(DRAFT)

    after = product_store.list_products()
    assert len(after) == len(before) + 1
    assert created['id'] > max(p['id'] for p in before)
    assert after[-1] == created
    assert created == {
        'id': 7,
        'name': 'Desk Lamp',
        'description': 'LED, dimmable',
        'price': 25.0,
        'stock': 8,
        'categoryId': 2,
        'imageUrl': 'https://example.com/lamp.png',
    }


def test_create_on_absent_collection_starts_at_one(app):
    created = product_store.create_product(DRAFT)
    assert created['id'] == 1
    assert is_seeded(product_store.COLLECTION)


def test_ids_follow_current_maximum(app):
    product_store.ensure_seeded()
    product_store.delete_product(6)
    assert product_store.create_product(DRAFT)['id'] == 6
    product_store.delete_product(2)
    assert product_store.create_product(DRAFT)['id'] == 7


def test_update_replaces_fields(app):
    product_store.ensure_seeded()
    assert product_store.update_product(3, dict(DRAFT, name='Big Mug', price=9.5)) is True
    updated = product_store.get_product(3)
    assert updated['name'] == 'Big Mug'
    assert updated['price'] == 9.5
    assert updated['imageUrl'] == 'https://example.com/lamp.png'
    # position unchanged
    assert [p['id'] for p in product_store.list_products()][:3] == [1, 2, 3]


def test_update_missing_id(app):
    product_store.ensure_seeded()
    assert product_store.update_product(404, DRAFT) is False


def test_delete_missing_id_changes_nothing(app):
    before = product_store.ensure_seeded()
    assert product_store.delete_product(404) is False
    assert product_store.list_products() == before


def test_replace_all_keeps_given_order(app):
    product_store.ensure_seeded()
    replacement = [
        {'id': 10, 'name': 'B', 'description': '', 'price': 2.0, 'stock': 1, 'categoryId': 1, 'imageUrl': ''},
        {'id': 3, 'name': 'A', 'description': '', 'price': 1.0, 'stock': 1, 'categoryId': 1, 'imageUrl': ''},
    ]
    product_store.replace_all(replacement)
    assert product_store.list_products() == replacement
    assert product_store.create_product(DRAFT)['id'] == 11


def test_filter_products():
    products = [
        {'id': 1, 'name': 'banana', 'price': 3.0, 'stock': 5, 'categoryId': 1},
        {'id': 2, 'name': 'Apple', 'price': 1.0, 'stock': 9, 'categoryId': 2},
        {'id': 3, 'name': 'apricot', 'price': 2.0, 'stock': 1, 'categoryId': 2},
    ]
    names = lambda items: [p['name'] for p in items]  # noqa: E731
    assert names(product_store.filter_products(products)) == ['Apple', 'apricot', 'banana']
    assert names(product_store.filter_products(products, search='AP')) == ['Apple', 'apricot']
    assert names(product_store.filter_products(products, category='2', sort='price-desc')) == ['apricot', 'Apple']
    assert names(product_store.filter_products(products, sort='stock-asc')) == ['apricot', 'banana', 'Apple']
    assert names(product_store.filter_products(products, sort='bogus')) == ['Apple', 'apricot', 'banana']


# ── Categories ────────────────────────────────────────────────────────────────

def test_category_upsert_is_case_insensitive(app):
    category_store.ensure_seeded()
    first = category_store.create_category('Shoes')
    second = category_store.create_category('  shoes ')
    assert first['created'] is True
    assert second['created'] is False
    assert first['category'] == second['category'] == {'id': 5, 'name': 'Shoes'}


def test_category_upsert_rejects_blank(app):
    assert category_store.create_category('   ') is None


def test_category_upsert_matches_seeded_names(app):
    category_store.ensure_seeded()
    result = category_store.create_category('BOOKS')
    assert result == {'category': {'id': 4, 'name': 'Books'}, 'created': False}


# ── Routes ────────────────────────────────────────────────────────────────────

def test_list_route_for_viewer(viewer):
    resp = viewer.get('/products/?sort=price-asc')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['total'] == 6
    assert body['canManage'] is False
    prices = [p['price'] for p in body['products']]
    assert prices == sorted(prices)


def test_list_route_search_and_category(admin):
    body = admin.get('/products/?q=MUG&category=2').get_json()
    assert [p['name'] for p in body['products']] == ['Ceramic Coffee Mug']


def test_view_route(viewer):
    assert viewer.get('/products/1').get_json()['name'] == 'Wireless Headphones'
    resp = viewer.get('/products/99')
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'not_found'


def test_create_route_with_new_category(admin):
    resp = admin.post('/products/', data={
        'name': 'Running Shoes', 'price': '89.9', 'stock': '12',
        'categoryId': 'new', 'newCategoryName': 'Shoes',
    })
    assert resp.status_code == 201
    product = resp.get_json()
    assert product['id'] == 7
    assert product['categoryId'] == 5
    assert {'id': 5, 'name': 'Shoes'} in admin.get('/products/categories').get_json()


def test_create_route_validation(admin):
    resp = admin.post('/products/', json={'name': '', 'price': 0, 'stock': -1, 'categoryId': 1})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['error'] == 'validation_failed'
    assert set(body['fields']) == {'name', 'price', 'stock'}
    assert len(admin.get('/products/').get_json()['products']) == 6


def test_edit_and_delete_routes(admin):
    resp = admin.put('/products/2', json=dict(DRAFT, name='Smarter Watch'))
    assert resp.status_code == 200
    assert resp.get_json()['name'] == 'Smarter Watch'

    assert admin.put('/products/99', json=DRAFT).status_code == 404

    assert admin.delete('/products/2').status_code == 204
    assert admin.post('/products/2/delete').status_code == 404
    assert admin.get('/products/').get_json()['total'] == 5


def test_viewer_cannot_mutate(viewer):
    assert viewer.put('/products/1', json=DRAFT).status_code == 403
    assert viewer.delete('/products/1').status_code == 403
    assert viewer.post('/products/import', json=[]).status_code == 403
    assert viewer.post('/products/categories', json={'name': 'X'}).status_code == 403


def test_export_route(viewer):
    resp = viewer.get('/products/export')
    assert resp.status_code == 200
    assert 'attachment; filename=products.json' in resp.headers['Content-Disposition']
    text = resp.get_data(as_text=True)
    assert text.startswith('[\n  {')
    assert len(json.loads(text)) == 6


def test_import_route_replaces_collection(admin):
    payload = [{'id': 1, 'name': 'Only', 'price': '3.333', 'stock': 1, 'categoryId': 1}]
    resp = admin.post('/products/import', json=payload)
    assert resp.status_code == 200
    assert resp.get_json() == {'imported': 1}
    products = admin.get('/products/').get_json()['products']
    assert products == [{'id': 1, 'name': 'Only', 'description': '', 'price': 3.33,
                         'stock': 1, 'categoryId': 1, 'imageUrl': ''}]


def test_import_route_accepts_file_upload(admin):
    exported = admin.get('/products/export').get_data()
    admin.delete('/products/1')
    resp = admin.post('/products/import', data={
        'file': (io.BytesIO(exported), 'products.json'),
    }, content_type='multipart/form-data')
    assert resp.status_code == 200
    assert resp.get_json() == {'imported': 6}


def test_invalid_import_leaves_store_untouched(admin):
    before = admin.get('/products/export').get_data(as_text=True)
    resp = admin.post('/products/import', json=[
        {'id': 1, 'name': 'A', 'price': 10, 'stock': 1, 'categoryId': 1},
        {'id': 1, 'name': 'B', 'price': 5, 'stock': 2, 'categoryId': 1},
    ])
    assert resp.status_code == 400
    assert resp.get_json()['errors'] == ['duplicate_id']
    assert admin.get('/products/export').get_data(as_text=True) == before


def test_import_route_rejects_bad_json(admin):
    resp = admin.post('/products/import', data=b'{not json', content_type='application/json')
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'invalid_json'

    resp = admin.post('/products/import', json={'id': 1})
    assert resp.get_json()['error'] == 'not_an_array'


def test_import_rejects_price_rounding_to_zero(admin):
    before = admin.get('/products/export').get_data(as_text=True)
    resp = admin.post('/products/import', json=[
        {'id': 1, 'name': 'Pin', 'price': 0.004, 'stock': 1, 'categoryId': 1},
    ])
    assert resp.status_code == 400
    assert resp.get_json()['errors'] == ['invalid_price']
    assert admin.get('/products/export').get_data(as_text=True) == before


def test_import_rejects_ids_beyond_column_range(admin):
    before = admin.get('/products/export').get_data(as_text=True)
    resp = admin.post('/products/import', json=[
        {'id': 1e20, 'name': 'Pin', 'price': 1, 'stock': 1, 'categoryId': 1},
    ])
    assert resp.status_code == 400
    assert resp.get_json()['errors'] == ['invalid_id']
    assert admin.get('/products/export').get_data(as_text=True) == before


def test_failed_import_write_is_rolled_back(admin, monkeypatch):
    before = admin.get('/products/export').get_data(as_text=True)
    unstorable = {'id': 10 ** 20, 'name': 'Pin', 'description': '', 'price': 1.0,
                  'stock': 1, 'categoryId': 1, 'imageUrl': ''}
    monkeypatch.setattr(
        'novastore.catalog.routes.validate_products_payload',
        lambda payload: {'valid': True, 'errors': [], 'problems': [], 'data': [unstorable]},
    )
    resp = admin.post('/products/import', json=[unstorable])
    assert resp.status_code == 500
    assert resp.get_json()['error'] == 'import_failed'
    assert admin.get('/products/export').get_data(as_text=True) == before


def test_create_route_rejects_price_rounding_to_zero(admin):
    resp = admin.post('/products/', json=dict(DRAFT, price=0.001))
    assert resp.status_code == 400
    assert set(resp.get_json()['fields']) == {'price'}

    resp = admin.post('/products/', json=dict(DRAFT, price=0.005))
    assert resp.status_code == 201
    assert resp.get_json()['price'] == 0.01
    assert len(admin.get('/products/').get_json()['products']) == 7


def test_out_of_range_product_id_is_not_found(viewer):
    resp = viewer.get('/products/' + '9' * 25)
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'not_found'


def test_category_routes(admin):
    created = admin.post('/products/categories', json={'name': 'Garden'})
    assert created.status_code == 201
    existing = admin.post('/products/categories', data={'name': 'garden'})
    assert existing.status_code == 200
    assert existing.get_json()['category'] == created.get_json()['category']
    assert admin.post('/products/categories', json={'name': ' '}).status_code == 400


# ── CLI ───────────────────────────────────────────────────────────────────────

def test_seed_and_reset_catalog_commands(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['seed-catalog'])
    assert result.exit_code == 0
    assert '4 categories, 6 products' in result.output

    result = runner.invoke(args=['reset-catalog'])
    assert result.exit_code == 0
    assert not is_seeded(product_store.COLLECTION)
    assert Product.query.count() == 0
