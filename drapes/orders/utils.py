# drapes/orders/utils.py

"""Search, board and calendar views over a list of orders."""

import calendar
from datetime import date
from typing import Dict, List

from drapes.catalog import OrderStatus
from drapes.domain import Order


def filter_orders(orders: List[Order], q: str) -> List[Order]:
    """
    Called by /orders/ and /orders/board
    Name and showroom match case-insensitively, phone as a plain substring.
    """
    q = (q or '').strip()
    if not q:
        return list(orders)
    needle = q.lower()
    return [
        o for o in orders
        if needle in (o.customer_name or '').lower()
        or q in (o.phone or '')
        or needle in (o.showroom or '').lower()
    ]


def order_card(order: Order) -> dict:
    return {
        'order_id'      : order.order_id,
        'customer_name' : order.customer_name,
        'phone'         : order.phone,
        'showroom'      : order.showroom,
        'due_date'      : order.due_date,
        'status'        : order.status.value,
        'windows'       : len(order.entries),
        'total_sqft'    : order.total_sqft,
    }


def board(orders: List[Order]) -> List[dict]:
    """One column per status, in lifecycle order, empty columns included."""
    columns = []
    for status in OrderStatus:
        cards = [order_card(o) for o in orders if o.status is status]
        columns.append({'status': status.value, 'count': len(cards), 'orders': cards})
    return columns


def orders_due_on(orders: List[Order], day: date) -> List[Order]:
    key = day.isoformat()
    return [o for o in orders if o.due_date == key]


def calendar_month(orders: List[Order], year: int, month: int) -> Dict[str, List[dict]]:
    """Orders due on each day of the month, keyed by ISO date; empty days omitted."""
    _, days = calendar.monthrange(year, month)
    out = {}
    for d in range(1, days + 1):
        day = date(year, month, d)
        due = orders_due_on(orders, day)
        if due:
            out[day.isoformat()] = [order_card(o) for o in due]
    return out
