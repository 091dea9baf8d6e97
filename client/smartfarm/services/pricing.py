"""Rental cost quote shown in the booking summary."""

from datetime import date
from decimal import Decimal

from smartfarm.core.dates import rental_days
from smartfarm.schemas.equipment import Equipment, RentalQuote


def quote(equipment: Equipment, start: date, end: date) -> RentalQuote:
    days = rental_days(start, end)
    if days <= 0:
        return RentalQuote(days=max(days, 0), rate=equipment.price, total=Decimal("0"))
    return RentalQuote(days=days, rate=equipment.price, total=equipment.price * days)
