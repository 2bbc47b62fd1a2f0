"""Read-only derivations over a list of bookings.

Nothing here touches the database: callers hand in the bookings they loaded
and get a fresh list or summary back each time filters or data change.
"""
from collections import Counter
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.utils import timezone

from .pricing import PLAYZONE, SKATEPARK

ALL = 'all'
PERIODS = ('daily', 'weekly', 'monthly', ALL)


def _matches_search(booking, term):
    fields = [booking.customer_name, booking.token_number, booking.address, booking.phone_number]
    return any(term in (value or '').lower() for value in fields)


def derive_view(bookings, date=None, status=ALL, game_type=ALL, search='', token=''):
    filtered = list(bookings)

    if date:
        filtered = [b for b in filtered if b.date_english == date]
    if status and status != ALL:
        filtered = [b for b in filtered if b.status == status]
    if game_type and game_type != ALL:
        filtered = [b for b in filtered if b.game_type == game_type]
    if search:
        term = search.lower()
        filtered = [b for b in filtered if _matches_search(b, term)]
    if token:
        needle = token.lower()
        filtered = [b for b in filtered if needle in (b.token_number or '').lower()]

    return filtered


def _local(dt):
    if timezone.is_aware(dt):
        return timezone.localtime(dt)
    return dt


def dashboard_stats(bookings):
    bookings = list(bookings)
    total = len(bookings)
    by_status = Counter(b.status for b in bookings)
    completed = [b for b in bookings if b.status == 'Completed']

    revenue = sum((b.price for b in completed if b.price), Decimal('0'))

    durations = [b.actual_duration_minutes for b in completed if b.actual_duration_minutes]
    average_session = sum(durations) / len(durations) if durations else 0

    hours = Counter(f"{_local(b.created_at).hour}:00" for b in bookings if b.created_at)
    peak_hour = hours.most_common(1)[0][0] if hours else 'N/A'

    return {
        'total_bookings': total,
        'pending_bookings': by_status['Pending'],
        'confirmed_bookings': by_status['Confirmed'],
        'completed_bookings': by_status['Completed'],
        'revenue': revenue,
        'average_session_minutes': average_session,
        'peak_hour': peak_hour,
        'conversion_rate': (len(completed) / total) * 100 if total else 0,
    }


def period_start(period, now):
    """Start of the reporting period containing ``now``; weeks start on Sunday."""
    now = _local(now)
    midnight = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)
    if period == 'daily':
        return midnight
    if period == 'weekly':
        return midnight - timedelta(days=(now.weekday() + 1) % 7)
    if period == 'monthly':
        return midnight.replace(day=1)
    if period == ALL:
        return None
    raise ValueError(f"Unknown period: {period}")


def _booked_at(booking, tzinfo):
    if booking.created_at:
        return booking.created_at
    return datetime.combine(booking.date_english, time.min, tzinfo=tzinfo)


def revenue_summary(bookings, period='daily', now=None):
    now = now or timezone.now()
    start = period_start(period, now)

    total = Decimal('0')
    for booking in bookings:
        if booking.status != 'Completed' or not booking.price:
            continue
        booked_at = _booked_at(booking, now.tzinfo)
        if start is not None and booked_at < start:
            continue
        if booked_at > now:
            continue
        total += booking.price
    return total


def game_counts(bookings):
    counts = Counter(b.game_type for b in bookings)
    return [{'name': name, 'count': counts[name]} for name in (PLAYZONE, SKATEPARK)]
