import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from drapes import create_app
from drapes.billing import reconcile_billing
from drapes.integrations.order_service import OrderServiceError

RAW = [
    {'order_id': 'o1', 'customer': 'Meena', 'payment_status': 'Paid',
     'stitching_breakup': [{'type': 'Pleated', 'qty': 6, 'rate': 100, 'amount': 600},
                           {'type': 'Stitching', 'subtype': 'Roman Blinds 48"', 'qty': 20, 'rate': 20, 'amount': 400}],
     'fitting_breakup': [{'type': 'Track fitting', 'qty': 2, 'rate': 150, 'amount': 300}],
     'grand_total': 1250},
    {'order_id': 'o2', 'customer': 'Ravi', 'stitching_total': 500, 'grand_total': 500},
]


class FakeClient:
    def list_billing(self, creds):
        return [reconcile_billing(b) for b in RAW]


def test_ledger_summary_and_bills(monkeypatch):
    app = create_app('testing')
    monkeypatch.setattr('drapes.ledger.routes.service_client', lambda: FakeClient())
    data = app.test_client().get('/billing/').get_json()
    assert [b['order_id'] for b in data['bills']] == ['o1', 'o2']
    first = data['bills'][0]
    assert (first['stitching_total'], first['fitting_total'], first['grand_total']) == (1000, 300, 1300)
    assert first['corrected'] is True
    assert data['summary'] == {'revenue': 1800, 'paid': 1300, 'pending': 500}


def test_invoice_lines_carry_units(monkeypatch):
    app = create_app('testing')
    monkeypatch.setattr('drapes.ledger.routes.service_client', lambda: FakeClient())
    data = app.test_client().get('/billing/o1').get_json()
    assert [line['unit'] for line in data['lines']] == ['panels', 'sqft', 'units']
    assert data['lines'][1]['subtype'] == 'Roman Blinds 48"'


def test_unknown_invoice_404(monkeypatch):
    app = create_app('testing')
    monkeypatch.setattr('drapes.ledger.routes.service_client', lambda: FakeClient())
    assert app.test_client().get('/billing/nope').status_code == 404


def test_service_failure_is_502(monkeypatch):
    app = create_app('testing')

    class Broken:
        def list_billing(self, creds):
            raise OrderServiceError('ledger offline', 500)

    monkeypatch.setattr('drapes.ledger.routes.service_client', lambda: Broken())
    resp = app.test_client().get('/billing/')
    assert resp.status_code == 502
    assert resp.get_json()['error'] == 'ledger offline'
