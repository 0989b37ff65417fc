# drapes/domain.py

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from drapes.catalog import DEFAULT_SHOWROOM, OrderStatus, normalize_status
from drapes.entries import WindowEntryRepository


class OrderValidationError(ValueError):
    """Raised when an order is saved without its required customer details."""

    def __init__(self, problems: List[str]) -> None:
        super().__init__('; '.join(problems))
        self.problems = problems


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Order:
    """A customer project and the windows measured for it."""
    order_id: Optional[str] = None
    customer_name: str = ''
    phone: str = ''
    address: str = ''
    showroom: str = DEFAULT_SHOWROOM
    status: OrderStatus = OrderStatus.FABRIC_PENDING
    due_date: str = ''
    tailor: str = ''
    fitter: str = ''
    created_at: str = field(default_factory=utcnow_iso)
    entries: WindowEntryRepository = field(default_factory=WindowEntryRepository)

    def __post_init__(self) -> None:
        self.status = normalize_status(self.status)

    def validate(self) -> List[str]:
        problems = []
        if not (self.customer_name or '').strip():
            problems.append('customer name is required')
        if not (self.phone or '').strip():
            problems.append('phone is required')
        return problems

    def ensure_valid(self) -> None:
        problems = self.validate()
        if problems:
            raise OrderValidationError(problems)

    @property
    def total_quantity(self) -> float:
        return self.entries.total_quantity()

    @property
    def total_sqft(self) -> float:
        return self.entries.total_sqft()

    def to_dict(self) -> dict:
        return {
            'order_id': self.order_id,
            'customer_name': self.customer_name,
            'phone': self.phone,
            'address': self.address,
            'showroom': self.showroom,
            'status': self.status.value,
            'due_date': self.due_date,
            'tailor': self.tailor,
            'fitter': self.fitter,
            'created_at': self.created_at,
            'entries': self.entries.to_list(),
            'total_quantity': self.total_quantity,
            'total_sqft': self.total_sqft,
        }


@dataclass(frozen=True)
class BillingLineItem:
    type: str
    qty: float
    rate: float
    amount: float
    subtype: Optional[str] = None

    def to_dict(self) -> dict:
        data = {'type': self.type, 'qty': self.qty, 'rate': self.rate, 'amount': self.amount}
        if self.subtype is not None:
            data['subtype'] = self.subtype
        return data


@dataclass
class OrderBilling:
    """Invoice figures for one order, with totals that agree with the lines."""
    order_id: str
    customer_name: str
    tailor: str
    fitter: str
    stitching_total: float
    fitting_total: float
    grand_total: float
    payment_status: str
    stitching_breakup: List[BillingLineItem] = field(default_factory=list)
    fitting_breakup: List[BillingLineItem] = field(default_factory=list)
    corrected: bool = False

    def to_dict(self) -> dict:
        return {
            'order_id': self.order_id,
            'customer_name': self.customer_name,
            'tailor': self.tailor,
            'fitter': self.fitter,
            'stitching_total': self.stitching_total,
            'fitting_total': self.fitting_total,
            'grand_total': self.grand_total,
            'payment_status': self.payment_status,
            'stitching_breakup': [i.to_dict() for i in self.stitching_breakup],
            'fitting_breakup': [i.to_dict() for i in self.fitting_breakup],
            'corrected': self.corrected,
        }
