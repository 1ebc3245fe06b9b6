import pytest
from novastore import create_app, db


@pytest.fixture
def client():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app.test_client()
        db.session.remove()
        db.drop_all()


def test_health_json(client):
    """Standard JSON response for load balancers."""
    resp = client.get('/health')
    assert resp.status_code == 200
    data = resp.get_json()
    assert data['status'] == 'ok'
    assert data['details']['db'] == 'ok'


def test_root_redirects_by_session(client):
    resp = client.get('/')
    assert resp.status_code == 302
    assert resp.headers['Location'].endswith('/auth/login')

    client.post('/auth/login', data={'email': 'admin@novastore.com', 'password': 'admin123'})
    resp = client.get('/')
    assert resp.headers['Location'].endswith('/dashboard')


def test_dashboard_summary(client):
    client.post('/auth/login', data={'email': 'admin@novastore.com', 'password': 'admin123'})
    data = client.get('/dashboard').get_json()
    assert data['user']['role'] == 'admin'
    assert data['canManage'] is True
    assert data['productCount'] == 6
    assert data['categoryCount'] == 4
    # Smart Watch (3) and Yoga Mat (0) are at or below the threshold
    assert data['lowStockCount'] == 2
    assert data['inventoryValue'] > 0


def test_unknown_route_is_json_404(client):
    resp = client.get('/nope')
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'not_found'
