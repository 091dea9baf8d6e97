"""
Booking date-overlap predicate.

ADVISORY ONLY
=============

The backend is the authority on conflicts and re-validates every request.
These checks run against whatever bookings the client fetched last, so they
can be stale: another renter may book the same dates between our fetch and
our submit. They exist to warn the user early, not to guarantee anything.

Ranges are inclusive on both ends. Two ranges [a1, a2] and [b1, b2] intersect
iff a1 <= b2 and b1 <= a2, so a booking ending on the day another one starts
is a conflict.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from smartfarm.schemas.booking import Booking, BookingStatus


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} is after end {self.end}")

    @classmethod
    def of(cls, booking: Booking) -> "DateRange":
        return cls(booking.start_date, booking.end_date)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def ranges_overlap(a: DateRange, b: DateRange) -> bool:
    return a.start <= b.end and b.start <= a.end


def _blocking(
    bookings: Iterable[Booking],
    statuses: Optional[Iterable[BookingStatus]],
) -> Iterable[Booking]:
    # statuses=None: every fetched booking blocks, whatever its status
    if statuses is None:
        return bookings
    allowed = {BookingStatus(s) for s in statuses}
    return (b for b in bookings if b.status in allowed)


def find_conflicts(
    candidate: DateRange,
    bookings: Iterable[Booking],
    statuses: Optional[Iterable[BookingStatus]] = None,
) -> list[Booking]:
    """Return the bookings whose range intersects the candidate."""
    return [
        booking for booking in _blocking(bookings, statuses)
        if ranges_overlap(candidate, DateRange.of(booking))
    ]


def has_conflict(
    candidate: DateRange,
    bookings: Iterable[Booking],
    statuses: Optional[Iterable[BookingStatus]] = None,
) -> bool:
    return any(
        ranges_overlap(candidate, DateRange.of(booking))
        for booking in _blocking(bookings, statuses)
    )


def is_date_unavailable(
    day: date,
    bookings: Iterable[Booking],
    statuses: Optional[Iterable[BookingStatus]] = None,
) -> bool:
    """True if a single calendar day falls inside any blocking booking."""
    return any(DateRange.of(b).contains(day) for b in _blocking(bookings, statuses))
