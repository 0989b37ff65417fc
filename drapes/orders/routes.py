# drapes/orders/routes.py

import logging
from datetime import datetime, timezone

from flask import Blueprint, request, jsonify, abort

from drapes import db
from drapes.auth.utils import credentials, service_client
from drapes.catalog import normalize_status
from drapes.models import OrderDraft
from drapes.orders.utils import board, calendar_month, filter_orders, order_card

bp = Blueprint('orders', __name__, url_prefix='/orders')

CUSTOMER_FIELDS = ('customer_name', 'phone', 'address', 'showroom', 'due_date', 'tailor', 'fitter')
WINDOW_FIELDS = ('window_name', 'stitch_type', 'lining_type', 'width', 'height', 'notes', 'images')
REQUIRED_WINDOW_FIELDS = ('stitch_type', 'width', 'height')


def _payload():
    return request.get_json(silent=True) or request.form


def _window_inputs(data) -> dict:
    inputs = {k: data.get(k) for k in WINDOW_FIELDS if k in data}
    images = inputs.get('images')
    if images is not None:
        inputs['images'] = [img for img in images if isinstance(img, str) and img] \
            if isinstance(images, list) else []
    return inputs


def _draft_json(draft: OrderDraft) -> dict:
    data = draft.to_order().to_dict()
    data['draft_id'] = draft.id
    return data


@bp.route('/')
def list_orders():
    orders = service_client().list_orders(credentials())
    orders = filter_orders(orders, request.args.get('q', ''))
    return jsonify(orders=[order_card(o) for o in orders])


@bp.route('/board')
def order_board():
    orders = service_client().list_orders(credentials())
    orders = filter_orders(orders, request.args.get('q', ''))
    return jsonify(columns=board(orders))


@bp.route('/kpis')
def kpis():
    return jsonify(service_client().get_kpis(credentials()))


@bp.route('/calendar/<int:year>/<int:month>')
def order_calendar(year, month):
    if not 1 <= month <= 12:
        abort(404)
    orders = service_client().list_orders(credentials())
    return jsonify(year=year, month=month, days=calendar_month(orders, year, month))


@bp.route('/<order_id>/delete', methods=['POST'])
def delete_order(order_id):
    service_client().delete_order(credentials(), order_id)
    for draft in OrderDraft.query.filter_by(remote_order_id=order_id).all():
        db.session.delete(draft)
    db.session.commit()
    return jsonify(success=True)


@bp.route('/drafts', methods=['POST'])
def create_draft():
    """Start a blank draft, or load an existing order into one."""
    data = _payload()
    draft = OrderDraft(created_at=datetime.now(timezone.utc).isoformat())
    order_id = data.get('order_id')
    if order_id:
        order = service_client().get_order(credentials(), order_id)
        if order is None:
            abort(404)
        draft.load_order(order)
    db.session.add(draft)
    db.session.commit()
    return jsonify(_draft_json(draft)), 201


@bp.route('/drafts/<int:draft_id>')
def view_draft(draft_id):
    draft = OrderDraft.query.get_or_404(draft_id)
    return jsonify(_draft_json(draft))


@bp.route('/drafts/<int:draft_id>/edit', methods=['POST'])
def edit_draft(draft_id):
    draft = OrderDraft.query.get_or_404(draft_id)
    data = _payload()
    for name in CUSTOMER_FIELDS:
        if name in data:
            setattr(draft, name, str(data.get(name) or '').strip())
    if 'status' in data:
        draft.status = normalize_status(data.get('status')).value
    db.session.commit()
    return jsonify(_draft_json(draft))


@bp.route('/drafts/<int:draft_id>/windows', methods=['POST'])
def add_window(draft_id):
    draft = OrderDraft.query.get_or_404(draft_id)
    order = draft.to_order()
    entry = order.entries.add(**_window_inputs(_payload()))
    draft.replace_entries(order.entries)
    db.session.commit()
    return jsonify(window=entry.to_dict(), total_quantity=order.total_quantity), 201


@bp.route('/drafts/<int:draft_id>/windows/<int:position>', methods=['POST'])
def update_window(draft_id, position):
    """Replace the window at ``position``; the payload must carry the whole entry."""
    draft = OrderDraft.query.get_or_404(draft_id)
    order = draft.to_order()
    if not 0 <= position < len(order.entries):
        abort(404)
    data = _payload()
    missing = [name for name in REQUIRED_WINDOW_FIELDS if name not in data]
    if missing:
        return jsonify(success=False, errors=[f'{name} is required' for name in missing]), 400
    entry = order.entries.update(position, **_window_inputs(data))
    draft.replace_entries(order.entries)
    db.session.commit()
    return jsonify(window=entry.to_dict(), total_quantity=order.total_quantity)


@bp.route('/drafts/<int:draft_id>/windows/<int:position>/remove', methods=['POST'])
def remove_window(draft_id, position):
    draft = OrderDraft.query.get_or_404(draft_id)
    order = draft.to_order()
    if not 0 <= position < len(order.entries):
        abort(404)
    order.entries.remove(position)
    draft.replace_entries(order.entries)
    db.session.commit()
    return jsonify(success=True, total_quantity=order.total_quantity)


@bp.route('/drafts/<int:draft_id>/save', methods=['POST'])
def save_draft(draft_id):
    """Validate and push the whole order to the order service."""
    draft = OrderDraft.query.get_or_404(draft_id)
    order = draft.to_order()
    problems = order.validate()
    if problems:
        return jsonify(success=False, errors=problems), 400

    result = service_client().save_order(credentials(), order)
    if not draft.remote_order_id and isinstance(result, dict):
        remote_id = result.get('order_id') or result.get('_id') or result.get('id')
        if remote_id:
            draft.remote_order_id = str(remote_id)
    db.session.commit()
    logging.info("saved draft %s as order %s (%s windows)",
                 draft.id, draft.remote_order_id, len(order.entries))
    return jsonify(success=True, order_id=draft.remote_order_id)
