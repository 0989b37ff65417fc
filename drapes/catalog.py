# drapes/catalog.py
"""Fixed catalogs shared by the order form, the board and the ledger."""

from enum import Enum


class OrderStatus(str, Enum):
    FABRIC_PENDING = 'Fabric Order Pending'
    IN_TRANSIT = 'Fabric In Transit'
    STITCHING = 'Stitching'
    INSTALLATION = 'Hardware/Material Installation'
    COMPLETED = 'Completed'


SHOWROOMS = ['Anna Nagar', 'Valasaravakkam']
DEFAULT_SHOWROOM = 'Main Showroom'

STITCH_TYPES = ['Pleated', 'Ripple', 'Eyelet', 'Roman Blinds 48"', 'Roman Blinds 54"', 'Blinds (Regular)']
LINING_TYPES = ['No Lining', 'Normal Lining', 'B/O Lining']

TAILORS = ['None', 'Dev', 'Dinesh']
FITTERS = ['None', 'Dev', 'Dinesh', 'Krishna']


# Checked top to bottom; the first rule with a matching needle wins.
STATUS_RULES = (
    (('pending',), OrderStatus.FABRIC_PENDING),
    (('transit', 'cutting'), OrderStatus.IN_TRANSIT),
    (('stitching',), OrderStatus.STITCHING),
    (('installation', 'hardware', 'fit'), OrderStatus.INSTALLATION),
    (('completed', 'handed', 'done'), OrderStatus.COMPLETED),
)


def normalize_status(raw) -> OrderStatus:
    """Map any free-text status onto one of the five workflow stages."""
    if isinstance(raw, OrderStatus):
        return raw
    text = str(raw if raw is not None else '').strip().lower()
    for needles, status in STATUS_RULES:
        if any(needle in text for needle in needles):
            return status
    return OrderStatus.FABRIC_PENDING
