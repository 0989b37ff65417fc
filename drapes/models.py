from drapes import db
from drapes.catalog import OrderStatus, normalize_status
from drapes.domain import Order
from drapes.entries import WindowEntry, WindowEntryRepository


class OrderDraft(db.Model):
    """An order being edited locally before it is saved to the order service."""
    __tablename__ = 'order_draft'
    id              = db.Column(db.Integer, primary_key=True)
    remote_order_id = db.Column(db.String(64), nullable=True)
    customer_name   = db.Column(db.String(200), nullable=False, default='')
    phone           = db.Column(db.String(32), nullable=False, default='')
    address         = db.Column(db.String(300), default='')
    showroom        = db.Column(db.String(100), default='')
    status          = db.Column(db.String(64), nullable=False, default=OrderStatus.FABRIC_PENDING.value)
    due_date        = db.Column(db.String(10), default='')
    tailor          = db.Column(db.String(64), default='')
    fitter          = db.Column(db.String(64), default='')
    created_at      = db.Column(db.String(40))

    entries = db.relationship(
        'DraftEntry',
        backref='draft',
        lazy=True,
        order_by='DraftEntry.position',
        cascade='all, delete-orphan'
    )

    def to_order(self) -> Order:
        repo = WindowEntryRepository.from_entries([e.to_window() for e in self.entries])
        order = Order(
            order_id=self.remote_order_id,
            customer_name=self.customer_name or '',
            phone=self.phone or '',
            address=self.address or '',
            showroom=self.showroom or '',
            status=normalize_status(self.status),
            due_date=self.due_date or '',
            tailor=self.tailor or '',
            fitter=self.fitter or '',
            entries=repo,
        )
        if self.created_at:
            order.created_at = self.created_at
        return order

    def load_order(self, order: Order) -> None:
        """Overwrite this draft with ``order``, windows included."""
        self.remote_order_id = order.order_id
        self.customer_name   = order.customer_name
        self.phone           = order.phone
        self.address         = order.address
        self.showroom        = order.showroom
        self.status          = order.status.value
        self.due_date        = order.due_date
        self.tailor          = order.tailor
        self.fitter          = order.fitter
        self.created_at      = order.created_at
        self.replace_entries(order.entries)

    def replace_entries(self, repo: WindowEntryRepository) -> None:
        self.entries = [DraftEntry.from_window(e, pos) for pos, e in enumerate(repo)]

class DraftEntry(db.Model):
    __tablename__ = 'draft_entry'
    id          = db.Column(db.Integer, primary_key=True)
    draft_id    = db.Column(db.Integer, db.ForeignKey('order_draft.id'), nullable=False)
    position    = db.Column(db.Integer, nullable=False)
    window_id   = db.Column(db.String(64), nullable=False)
    window_name = db.Column(db.String(200), default='Window')
    stitch_type = db.Column(db.String(64), nullable=False)
    lining_type = db.Column(db.String(64))
    width       = db.Column(db.Float, default=0.0)
    height      = db.Column(db.Float, default=0.0)
    panels      = db.Column(db.Integer, default=0)
    quantity    = db.Column(db.Float, default=0.0)
    track       = db.Column(db.Float, default=0.0)
    sqft        = db.Column(db.Float, default=0.0)
    notes       = db.Column(db.Text, default='')
    images      = db.Column(db.JSON)

    @classmethod
    def from_window(cls, entry: WindowEntry, position: int) -> 'DraftEntry':
        return cls(
            position    = position,
            window_id   = entry.window_id,
            window_name = entry.window_name,
            stitch_type = entry.stitch_type,
            lining_type = entry.lining_type,
            width       = entry.width,
            height      = entry.height,
            panels      = entry.panels,
            quantity    = entry.quantity,
            track       = entry.track,
            sqft        = entry.sqft,
            notes       = entry.notes,
            images      = list(entry.images),
        )

    def to_window(self) -> WindowEntry:
        return WindowEntry(
            window_id=self.window_id,
            window_name=self.window_name or 'Window',
            stitch_type=self.stitch_type,
            lining_type=self.lining_type or '',
            width=self.width or 0.0,
            height=self.height or 0.0,
            panels=self.panels or 0,
            quantity=self.quantity or 0.0,
            track=self.track or 0.0,
            sqft=self.sqft or 0.0,
            notes=self.notes or '',
            images=tuple(self.images or ()),
        )
