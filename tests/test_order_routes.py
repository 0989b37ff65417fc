import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from drapes import create_app, db
from drapes.auth.utils import TOKEN_KEY
from drapes.integrations.order_service import AuthRequired, Credentials
from drapes.models import OrderDraft
from drapes.normalize import order_from_backend, order_to_backend


def setup_app():
    app = create_app('testing')
    with app.app_context():
        db.drop_all()
        db.create_all()
    return app


class FakeClient:
    def __init__(self, orders=None, remote=None):
        self.orders = orders or []
        self.remote = remote or {}
        self.saved = []
        self.deleted = []
        self.creds = []

    def list_orders(self, creds):
        self.creds.append(creds)
        return list(self.orders)

    def get_order(self, creds, order_id):
        raw = self.remote.get(order_id)
        return order_from_backend(raw) if raw else None

    def save_order(self, creds, order):
        order.ensure_valid()
        self.saved.append(order_to_backend(order))
        return {'order_id': 'remote-1'}

    def delete_order(self, creds, order_id):
        self.deleted.append(order_id)

    def get_kpis(self, creds):
        return {'orders': 3}

    def login(self, username, password):
        return Credentials('tok-123') if password == 'right' else None


def use_fake(monkeypatch, fake):
    monkeypatch.setattr('drapes.orders.routes.service_client', lambda: fake)
    monkeypatch.setattr('drapes.auth.routes.service_client', lambda: fake)


SAMPLE = [
    order_from_backend({'_id': 'a', 'name': 'Meena', 'phone': '98400 11111', 'showroom': 'Anna Nagar',
                        'status': 'Fabric Order Pending', 'due_date': '2026-11-02',
                        'entries': [{'Stitch': 'Roman Blinds 48"', 'SQFT': 20}]}),
    order_from_backend({'_id': 'b', 'name': 'Ravi', 'phone': '98765', 'showroom': 'Valasaravakkam',
                        'status': 'stitching', 'due_date': '2026-11-02'}),
    order_from_backend({'_id': 'c', 'name': 'Anu', 'phone': '90000', 'showroom': 'Anna Nagar',
                        'status': 'completed', 'due_date': '2026-12-01'}),
]


def test_draft_window_flow_and_save(monkeypatch):
    app = setup_app()
    fake = FakeClient()
    use_fake(monkeypatch, fake)
    client = app.test_client()

    resp = client.post('/orders/drafts', json={})
    assert resp.status_code == 201
    draft_id = resp.get_json()['draft_id']

    resp = client.post(f'/orders/drafts/{draft_id}/windows',
                       json={'window_name': 'Living', 'stitch_type': 'Pleated', 'width': 54, 'height': 84})
    assert resp.status_code == 201
    first = resp.get_json()['window']
    assert (first['panels'], first['quantity'], first['sqft'], first['track']) == (3, 7.54, 0, 4.5)

    resp = client.post(f'/orders/drafts/{draft_id}/windows/0',
                       json={'window_name': 'Living', 'stitch_type': 'Roman Blinds 48"',
                             'width': 48, 'height': 60, 'images': ['data:image/png;base64,AA', 3]})
    assert resp.status_code == 200
    edited = resp.get_json()['window']
    assert edited['window_id'] == first['window_id']
    assert (edited['panels'], edited['sqft'], edited['track']) == (1, 20.0, 0)
    assert edited['images'] == ['data:image/png;base64,AA']

    # name and phone are required before anything is sent
    resp = client.post(f'/orders/drafts/{draft_id}/save')
    assert resp.status_code == 400
    assert resp.get_json()['errors'] == ['customer name is required', 'phone is required']
    assert fake.saved == []

    client.post(f'/orders/drafts/{draft_id}/edit',
                json={'customer_name': ' Meena ', 'phone': '98400', 'status': 'Fabric cutting'})
    resp = client.post(f'/orders/drafts/{draft_id}/save')
    assert resp.status_code == 200
    assert resp.get_json()['order_id'] == 'remote-1'

    payload = fake.saved[0]
    assert payload['customer']['name'] == 'Meena'
    assert payload['status'] == 'Fabric In Transit'
    assert len(payload['entries']) == 1
    assert payload['entries'][0]['SQFT'] == 20.0
    assert payload['entries'][0]['window_id'] == first['window_id']

    with app.app_context():
        assert db.session.get(OrderDraft, draft_id).remote_order_id == 'remote-1'


def test_update_missing_window_404(monkeypatch):
    app = setup_app()
    use_fake(monkeypatch, FakeClient())
    client = app.test_client()
    draft_id = client.post('/orders/drafts', json={}).get_json()['draft_id']
    resp = client.post(f'/orders/drafts/{draft_id}/windows/3', json={'stitch_type': 'Pleated'})
    assert resp.status_code == 404
    assert client.get('/orders/drafts/999').status_code == 404


def test_remove_window(monkeypatch):
    app = setup_app()
    use_fake(monkeypatch, FakeClient())
    client = app.test_client()
    draft_id = client.post('/orders/drafts', json={}).get_json()['draft_id']
    client.post(f'/orders/drafts/{draft_id}/windows', json={'stitch_type': 'Pleated', 'width': 54, 'height': 84})
    client.post(f'/orders/drafts/{draft_id}/windows', json={'stitch_type': 'Eyelet', 'width': 100, 'height': 100})
    resp = client.post(f'/orders/drafts/{draft_id}/windows/0/remove')
    assert resp.get_json()['total_quantity'] == 11.69
    data = client.get(f'/orders/drafts/{draft_id}').get_json()
    assert [e['stitch_type'] for e in data['entries']] == ['Eyelet']


def test_load_remote_order_into_draft(monkeypatch):
    app = setup_app()
    fake = FakeClient(remote={'o7': {
        '_id': 'o7', 'customer': {'name': 'Ravi', 'phone': '98765'}, 'status': 'Handed over',
        'entries': [{'window_id': 'w1', 'Stitch': 'Ripple', 'Width': 80, 'Height': 90,
                     'Panels': 4, 'Quantity': 9.03, 'Track': 7}],
    }})
    use_fake(monkeypatch, fake)
    client = app.test_client()
    resp = client.post('/orders/drafts', json={'order_id': 'o7'})
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['order_id'] == 'o7'
    assert data['customer_name'] == 'Ravi'
    assert data['status'] == 'Completed'
    assert data['entries'][0]['window_id'] == 'w1'
    assert data['total_quantity'] == 9.03

    resp = client.post(f"/orders/drafts/{data['draft_id']}/save")
    assert resp.get_json()['order_id'] == 'o7'

    assert client.post('/orders/drafts', json={'order_id': 'missing'}).status_code == 404


def test_list_and_search(monkeypatch):
    app = setup_app()
    use_fake(monkeypatch, FakeClient(orders=SAMPLE))
    client = app.test_client()
    assert len(client.get('/orders/').get_json()['orders']) == 3
    names = [o['customer_name'] for o in client.get('/orders/?q=anna').get_json()['orders']]
    assert names == ['Meena', 'Anu']
    names = [o['customer_name'] for o in client.get('/orders/?q=98765').get_json()['orders']]
    assert names == ['Ravi']


def test_board_columns(monkeypatch):
    app = setup_app()
    use_fake(monkeypatch, FakeClient(orders=SAMPLE))
    columns = app.test_client().get('/orders/board').get_json()['columns']
    assert [c['status'] for c in columns] == [
        'Fabric Order Pending', 'Fabric In Transit', 'Stitching',
        'Hardware/Material Installation', 'Completed',
    ]
    assert [c['count'] for c in columns] == [1, 0, 1, 0, 1]
    assert columns[0]['orders'][0]['total_sqft'] == 20.0


def test_calendar(monkeypatch):
    app = setup_app()
    use_fake(monkeypatch, FakeClient(orders=SAMPLE))
    client = app.test_client()
    days = client.get('/orders/calendar/2026/11').get_json()['days']
    assert list(days) == ['2026-11-02']
    assert sorted(o['order_id'] for o in days['2026-11-02']) == ['a', 'b']
    assert client.get('/orders/calendar/2026/13').status_code == 404


def test_delete_removes_local_drafts(monkeypatch):
    app = setup_app()
    fake = FakeClient(remote={'o7': {'_id': 'o7', 'name': 'Ravi', 'phone': '1'}})
    use_fake(monkeypatch, fake)
    client = app.test_client()
    client.post('/orders/drafts', json={'order_id': 'o7'})
    resp = client.post('/orders/o7/delete')
    assert resp.status_code == 200
    assert fake.deleted == ['o7']
    with app.app_context():
        assert OrderDraft.query.count() == 0


def test_login_stores_token_and_passes_it_on(monkeypatch):
    app = setup_app()
    fake = FakeClient(orders=SAMPLE)
    use_fake(monkeypatch, fake)
    client = app.test_client()
    assert client.post('/auth/login', json={'username': 'staff', 'password': 'wrong'}).status_code == 401
    assert client.post('/auth/login', json={'username': 'staff', 'password': 'right'}).status_code == 200
    client.get('/orders/')
    assert fake.creds[-1] == Credentials('tok-123')
    client.post('/auth/logout')
    with client.session_transaction() as sess:
        assert TOKEN_KEY not in sess


def test_expired_token_clears_session(monkeypatch):
    app = setup_app()

    class Expired(FakeClient):
        def list_orders(self, creds):
            raise AuthRequired('AUTH_REQUIRED', 401)

    use_fake(monkeypatch, Expired())
    client = app.test_client()
    with client.session_transaction() as sess:
        sess[TOKEN_KEY] = 'old'
    resp = client.get('/orders/')
    assert resp.status_code == 401
    assert resp.get_json()['error'] == 'AUTH_REQUIRED'
    with client.session_transaction() as sess:
        assert TOKEN_KEY not in sess


def test_kpis(monkeypatch):
    app = setup_app()
    use_fake(monkeypatch, FakeClient())
    assert app.test_client().get('/orders/kpis').get_json() == {'orders': 3}


def test_update_window_needs_whole_entry(monkeypatch):
    app = setup_app()
    use_fake(monkeypatch, FakeClient())
    client = app.test_client()
    draft_id = client.post('/orders/drafts', json={}).get_json()['draft_id']
    client.post(f'/orders/drafts/{draft_id}/windows',
                json={'window_name': 'Hall', 'stitch_type': 'Eyelet', 'width': 100, 'height': 100,
                      'images': ['data:image/png;base64,AA']})

    resp = client.post(f'/orders/drafts/{draft_id}/windows/0', json={'width': 120})
    assert resp.status_code == 400
    assert resp.get_json()['errors'] == ['stitch_type is required', 'height is required']

    data = client.get(f'/orders/drafts/{draft_id}').get_json()
    window = data['entries'][0]
    assert (window['window_name'], window['width']) == ('Hall', 100)
    assert window['images'] == ['data:image/png;base64,AA']
