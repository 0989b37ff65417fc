# drapes/ledger/routes.py

from flask import Blueprint, jsonify, abort

from drapes.auth.utils import credentials, service_client
from drapes.billing import find_bill, invoice_lines, ledger_summary

bp = Blueprint('billing', __name__, url_prefix='/billing')


@bp.route('/')
def ledger():
    """
    Reconciled ledger.
    Returns { bills: [ OrderBilling, … ], summary: {revenue, paid, pending} }.
    """
    bills = service_client().list_billing(credentials())
    return jsonify(
        bills=[b.to_dict() for b in bills],
        summary=ledger_summary(bills),
    )


@bp.route('/<order_id>')
def invoice(order_id):
    bills = service_client().list_billing(credentials())
    bill = find_bill(bills, order_id)
    if bill is None:
        abort(404)
    data = bill.to_dict()
    data['lines'] = invoice_lines(bill)
    return jsonify(data)
