"""Sequential token numbers for bookings.

The next token is ``max(existing) + 1`` over every booking on record. The
read and the later insert are not atomic, so two concurrent creators can be
handed the same token.
"""
import logging
import re
from typing import Optional

from django.db import DatabaseError, transaction

from .models import Booking

logger = logging.getLogger(__name__)

FALLBACK_TOKEN = '1'

_NON_DIGITS = re.compile(r'[^0-9]')


class StoreUnavailable(Exception):
    pass


def parse_token(token) -> Optional[int]:
    """ASCII digits of ``token`` as an int, or ``None`` when there are none."""
    if not token or not isinstance(token, str):
        return None
    digits = _NON_DIGITS.sub('', token)
    if not digits:
        return None
    try:
        return int(digits)
    except ValueError:
        # past the interpreter's int string-conversion limit
        return None


def allocate(tokens) -> str:
    highest = 0
    for token in tokens:
        value = parse_token(token)
        if value is not None and value > highest:
            highest = value
    return str(highest + 1)


def existing_tokens():
    # Savepoint, so a failed read leaves the caller's transaction usable.
    try:
        with transaction.atomic():
            return list(Booking.objects.values_list('token_number', flat=True))
    except DatabaseError as e:
        raise StoreUnavailable(str(e)) from e


def next_token_number() -> str:
    """Allocate from the booking table, or hand out ``"1"`` if it can't be read."""
    try:
        return allocate(existing_tokens())
    except StoreUnavailable:
        logger.exception("Could not read existing tokens, falling back to %s", FALLBACK_TOKEN)
        return FALLBACK_TOKEN
