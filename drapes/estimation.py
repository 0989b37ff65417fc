# drapes/estimation.py
"""Fabric quantity estimation for a single window.

Styles fall into two families.  Draped styles (Pleated, Ripple, Eyelet and
anything else that isn't a blind) are measured in panels, running length
and track.  Blind styles are measured in square feet and never get track.
The family test is a case-sensitive substring match on the catalog name.
"""

from typing import NamedTuple

from drapes.numbers import ceil_half, non_negative, round2, round_half_up

# width (inches) covered by one panel of each pleat style
PANEL_WIDTHS = {
    'Pleated': 18,
    'Ripple': 20,
    'Eyelet': 24,
}

HEM_ALLOWANCE = 14   # inches added to the drop for seams and hems
RUNNING_UNIT = 39    # inches per unit of running length
INCHES_PER_FOOT = 12

BLIND_MARKERS = ('Roman', 'Blinds')


class Estimate(NamedTuple):
    panels: int
    quantity: float
    sqft: float
    track: float


def is_blind_style(stitch_type: str) -> bool:
    stitch_type = stitch_type or ''
    return any(marker in stitch_type for marker in BLIND_MARKERS)


def panel_count(stitch_type: str, width: float) -> int:
    divisor = PANEL_WIDTHS.get(stitch_type)
    if divisor is None:
        # blinds and anything unknown are costed as a single unit
        return 1
    return round_half_up(width / divisor)


def estimate(stitch_type: str, width, height) -> Estimate:
    """Compute panels, fabric quantity, square footage and track length.

    ``width`` and ``height`` are inches.  Anything that isn't a non-negative
    number is treated as 0, so this never raises.
    """
    width = non_negative(width)
    height = non_negative(height)

    panels = panel_count(stitch_type, width)
    height_factor = (height + HEM_ALLOWANCE) / RUNNING_UNIT
    quantity = round2(panels * height_factor)

    width_ft = ceil_half(width / INCHES_PER_FOOT)
    if is_blind_style(stitch_type):
        height_ft = ceil_half(height / INCHES_PER_FOOT)
        sqft = round2(width_ft * height_ft)
        track = 0.0
    else:
        sqft = 0.0
        track = width_ft

    return Estimate(panels=panels, quantity=quantity, sqft=sqft, track=track)
