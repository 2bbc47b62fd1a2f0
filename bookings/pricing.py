from decimal import Decimal
from typing import NamedTuple, Optional

PLAYZONE = 'Playzone'
SKATEPARK = 'Skatepark'

PLAYZONE_PACKAGES = ('1hr', 'unlimited')
SKATEPARK_PACKAGES = ('30min', '1hr')

ZERO = Decimal('0')


class PriceTable(NamedTuple):
    playzone_1hr: Decimal = Decimal('200')
    playzone_unlimited: Decimal = Decimal('350')
    skatepark_30min: Decimal = Decimal('100')
    skatepark_1hr: Decimal = Decimal('150')
    skatepark_extra_hour: Decimal = Decimal('100')


DEFAULT_PRICES = PriceTable()


def _decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def unit_price(game_type: str, package: Optional[str], extra_hours: int, prices: PriceTable) -> Decimal:
    """Per-person price for a selection, or zero if nothing usable is selected."""
    if game_type == PLAYZONE:
        if package == '1hr':
            return _decimal(prices.playzone_1hr)
        if package == 'unlimited':
            return _decimal(prices.playzone_unlimited)
        return ZERO

    if game_type == SKATEPARK:
        if package == '30min':
            base = _decimal(prices.skatepark_30min)
        elif package == '1hr':
            base = _decimal(prices.skatepark_1hr)
        else:
            return ZERO
        return base + (extra_hours or 0) * _decimal(prices.skatepark_extra_hour)

    return ZERO


def compute_price(game_type: str, package: Optional[str], extra_hours: int = 0,
                  number_of_persons: int = 1, prices: PriceTable = DEFAULT_PRICES) -> Decimal:
    """Total charge for a booking.

    Extra hours only apply to Skatepark. An incomplete or unknown selection
    prices at zero so a half-filled form can be re-quoted on every change.
    """
    return unit_price(game_type, package, extra_hours, prices) * (number_of_persons or 0)
