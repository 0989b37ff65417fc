# drapes/billing.py
"""Billing reconciliation for records coming from the external ledger.

Line item amounts are taken as given.  Subtotals and the grand total are
only trusted when they agree with the lines they summarise; otherwise they
are recomputed and the record is flagged as corrected.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from drapes.domain import BillingLineItem, OrderBilling
from drapes.normalize import first_present
from drapes.numbers import round2, to_float

TOLERANCE = 0.01

STITCHING = 'stitching'
FITTING = 'fitting'

PAID = 'Paid'
PENDING = 'Pending'


def parse_line_item(raw) -> BillingLineItem:
    raw = raw if isinstance(raw, dict) else {}
    subtype = raw.get('subtype')
    return BillingLineItem(
        type=str(first_present(raw, 'type', default='')),
        subtype=str(subtype) if subtype not in (None, '') else None,
        qty=to_float(raw.get('qty')),
        rate=to_float(raw.get('rate')),
        amount=to_float(raw.get('amount')),
    )


def parse_breakup(raw) -> List[BillingLineItem]:
    if not isinstance(raw, list):
        return []
    return [parse_line_item(item) for item in raw]


def _subtotal(declared, items: List[BillingLineItem]) -> Tuple[float, bool]:
    """Return (subtotal, corrected)."""
    summed = round2(sum(i.amount for i in items))
    value = to_float(declared, None)
    if value is None:
        return summed, bool(items) or declared not in (None, '')
    if items and abs(value - summed) > TOLERANCE:
        return summed, True
    return round2(value), False


def _payment_status(raw) -> str:
    return PAID if str(raw or '').strip().lower() == 'paid' else PENDING


def _customer_name(raw: dict) -> str:
    name = first_present(raw, 'customer.name', 'customer', 'customer_name', 'name',
                         default='Unknown Client')
    if isinstance(name, dict):
        name = first_present(raw, 'customer_name', 'name', default='Unknown Client')
    return str(name)


def reconcile_billing(raw) -> OrderBilling:
    """Build a display-safe OrderBilling from one raw ledger record."""
    raw = raw if isinstance(raw, dict) else {}
    stitching = parse_breakup(raw.get('stitching_breakup'))
    fitting = parse_breakup(raw.get('fitting_breakup'))

    stitching_total, s_fixed = _subtotal(raw.get('stitching_total'), stitching)
    fitting_total, f_fixed = _subtotal(raw.get('fitting_total'), fitting)

    expected = round2(stitching_total + fitting_total)
    declared = to_float(raw.get('grand_total'), None)
    if declared is not None and abs(declared - expected) <= TOLERANCE:
        grand_total, g_fixed = round2(declared), False
    else:
        grand_total, g_fixed = expected, raw.get('grand_total') not in (None, '')

    bill = OrderBilling(
        order_id=str(first_present(raw, 'order_id', '_id', default='N/A')),
        customer_name=_customer_name(raw),
        tailor=str(first_present(raw, 'tailor', default='Not Assigned')),
        fitter=str(first_present(raw, 'fitter', default='Not Assigned')),
        stitching_total=stitching_total,
        fitting_total=fitting_total,
        grand_total=grand_total,
        payment_status=_payment_status(raw.get('payment_status')),
        stitching_breakup=stitching,
        fitting_breakup=fitting,
        corrected=s_fixed or f_fixed or g_fixed,
    )
    if bill.corrected:
        logging.warning(
            "billing totals for order %s recomputed: stitching=%s fitting=%s grand=%s "
            "(declared %s/%s/%s)",
            bill.order_id, stitching_total, fitting_total, grand_total,
            raw.get('stitching_total'), raw.get('fitting_total'), raw.get('grand_total'),
        )
    return bill


def unit_label(item: BillingLineItem, section: str) -> str:
    """Unit a line's quantity is counted in; derived from its description."""
    if section == FITTING:
        return 'units'
    text = f"{item.type or ''} {item.subtype or ''}".lower()
    if 'blind' in text or 'roman' in text:
        return 'sqft'
    return 'panels'


def invoice_lines(bill: OrderBilling) -> List[dict]:
    """Stitching then fitting lines, each with its unit label."""
    lines = []
    for section, items in ((STITCHING, bill.stitching_breakup), (FITTING, bill.fitting_breakup)):
        for item in items:
            line = item.to_dict()
            line['section'] = section
            line['unit'] = unit_label(item, section)
            lines.append(line)
    return lines


def ledger_summary(bills: Iterable[OrderBilling]) -> dict:
    bills = list(bills)
    return {
        'revenue': round2(sum(b.grand_total for b in bills)),
        'paid': round2(sum(b.grand_total for b in bills if b.payment_status == PAID)),
        'pending': round2(sum(b.grand_total for b in bills if b.payment_status == PENDING)),
    }


def find_bill(bills: Iterable[OrderBilling], order_id: str) -> Optional[OrderBilling]:
    return next((b for b in bills if b.order_id == str(order_id)), None)
