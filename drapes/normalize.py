# drapes/normalize.py
"""Mapping between the order service's records and our own types.

The service has changed shape more than once, so every field is looked up
under a few possible keys and falls back to a fixed default.  Nothing in
here raises on a malformed record; the worst case is an order made of
defaults.
"""

import re
from typing import Callable, List, Optional, Sequence, Tuple

from drapes.catalog import DEFAULT_SHOWROOM, LINING_TYPES, normalize_status
from drapes.config import BaseConfig
from drapes.domain import Order, utcnow_iso
from drapes.entries import WindowEntry, WindowEntryRepository, new_window_id
from drapes.numbers import to_float, to_int

_MISSING = object()


def first_present(record, *paths, default=''):
    """Return the first value found under ``paths`` that isn't None or ''.

    A path may reach into nested dicts with dots, e.g. ``"customer.name"``.
    """
    if not isinstance(record, dict):
        return default
    for path in paths:
        value = record
        for key in path.split('.'):
            value = value.get(key, _MISSING) if isinstance(value, dict) else _MISSING
        if value is _MISSING or value is None or value == '':
            continue
        return value
    return default


def unwrap_list(payload, *keys) -> list:
    """Accept either a bare list or a dict carrying the list under ``keys``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

_HEX_ID = re.compile(r'[0-9a-fA-F]{24}')
_QUOTES = re.compile(r'^["\']|["\']$')


def _gridfs_url(api_base: str, image_id: str) -> str:
    return f"{api_base.rstrip('/')}/images/gridfs/{image_id}"


ImageRule = Tuple[Callable[[str], bool], Callable[[str, str], str]]

# (predicate, transform) pairs, first match wins.  Unmatched values are dropped.
IMAGE_RULES: Sequence[ImageRule] = (
    (lambda s: s.lower().startswith('gridfs:'),
     lambda s, base: _gridfs_url(base, s.split(':')[1])),
    (lambda s: s.startswith('data:image'),
     lambda s, base: s),
    (lambda s: len(s) > 50 and '/' not in s,
     lambda s, base: f'data:image/jpeg;base64,{s}'),
    (lambda s: bool(_HEX_ID.fullmatch(s)),
     lambda s, base: _gridfs_url(base, s)),
)


def normalize_image(raw, api_base: Optional[str] = None) -> str:
    """Rewrite one stored image reference into something a browser can load.

    Returns '' when the value can't be interpreted.
    """
    if not raw or not isinstance(raw, str):
        return ''
    api_base = api_base or BaseConfig.ORDER_API_URL
    clean = _QUOTES.sub('', raw.strip())
    for matches, transform in IMAGE_RULES:
        if matches(clean):
            return transform(clean, api_base)
    return ''


def sanitize_images(images, api_base: Optional[str] = None) -> List[str]:
    if not isinstance(images, list):
        return []
    out = (normalize_image(img, api_base) for img in images)
    return [img for img in out if img]


# ---------------------------------------------------------------------------
# Orders and windows
# ---------------------------------------------------------------------------

def entry_from_backend(raw, api_base: Optional[str] = None) -> WindowEntry:
    """Build a WindowEntry from a stored window, keeping its stored numbers."""
    raw = raw if isinstance(raw, dict) else {}
    return WindowEntry(
        window_id=str(first_present(raw, 'window_id', '_id', default='') or new_window_id()),
        window_name=str(first_present(raw, 'Window', 'window_name', default='Window')),
        stitch_type=str(first_present(raw, 'Stitch', 'stitch_type', default='Pleated')),
        lining_type=str(first_present(raw, 'Lining', 'lining_type', default=LINING_TYPES[0])),
        width=to_float(first_present(raw, 'Width', 'width', default=None)),
        height=to_float(first_present(raw, 'Height', 'height', default=None)),
        panels=to_int(first_present(raw, 'Panels', 'panels', default=None)),
        quantity=to_float(first_present(raw, 'Quantity', 'quantity', default=None)),
        track=to_float(first_present(raw, 'Track', 'track', default=None)),
        sqft=to_float(first_present(raw, 'SQFT', 'sqft', default=None)),
        notes=str(first_present(raw, 'Notes', 'notes', default='')),
        images=tuple(sanitize_images(first_present(raw, 'Images', 'images', default=None), api_base)),
    )


def order_from_backend(raw, api_base: Optional[str] = None) -> Order:
    raw = raw if isinstance(raw, dict) else {}
    order_id = first_present(raw, 'order_id', '_id', 'id', default=None)
    entries = raw.get('entries')
    if not isinstance(entries, list):
        entries = []
    return Order(
        order_id=str(order_id) if order_id is not None else None,
        customer_name=str(first_present(
            raw, 'name', 'customer.name', 'customer_name', default='Client Name Unavailable')),
        phone=str(first_present(raw, 'phone', 'customer.phone')),
        address=str(first_present(raw, 'address', 'customer.address')),
        showroom=str(first_present(raw, 'showroom', 'customer.showroom', default=DEFAULT_SHOWROOM)),
        status=normalize_status(raw.get('status')),
        due_date=str(first_present(raw, 'due_date')),
        tailor=str(first_present(raw, 'tailor')),
        fitter=str(first_present(raw, 'fitter')),
        created_at=str(first_present(raw, 'created_at', default='') or utcnow_iso()),
        entries=WindowEntryRepository.from_entries(
            [entry_from_backend(e, api_base) for e in entries]
        ),
    )


def entry_to_backend(entry: WindowEntry) -> dict:
    return {
        'window_id': entry.window_id,
        'Window': entry.window_name,
        'Stitch': entry.stitch_type,
        'Lining': entry.lining_type,
        'Width': entry.width,
        'Height': entry.height,
        'Panels': entry.panels,
        'Quantity': entry.quantity,
        'Track': entry.track,
        'SQFT': entry.sqft,
        'Notes': entry.notes,
        'Images': list(entry.images),
    }


def order_to_backend(order: Order) -> dict:
    """Payload for a full save; derived quantities are sent as computed here."""
    return {
        'customer': {
            'name': order.customer_name,
            'phone': order.phone,
            'address': order.address,
            'showroom': order.showroom,
        },
        'status': order.status.value,
        'due_date': order.due_date,
        'tailor': order.tailor,
        'fitter': order.fitter,
        'entries': [entry_to_backend(e) for e in order.entries],
    }
