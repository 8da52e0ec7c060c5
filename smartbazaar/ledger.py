# smartbazaar/ledger.py
"""Stock ledger for listings.

Both operations mutate a `Listing` row that was loaded in the caller's
session; the change is written by that session's commit, conditional on the
listing's version.
"""
from decimal import Decimal

from .exceptions import InsufficientStock, InvalidInput
from .models import Listing
from .utils import format_quantity

ACTIVE = "active"
SOLD = "sold"
EXPIRED = "expired"
LISTING_STATUSES = (ACTIVE, SOLD, EXPIRED)


def reserve(listing: Listing, quantity) -> Listing:
    quantity = Decimal(str(quantity))
    if quantity <= 0:
        raise InvalidInput("quantity must be greater than zero")
    available = Decimal(listing.quantity)
    if listing.status != ACTIVE:
        raise InsufficientStock(f"{listing.crop_name} is no longer available")
    if quantity > available:
        raise InsufficientStock(f"only {format_quantity(available)}{listing.unit} available")
    remaining = available - quantity
    listing.quantity = remaining
    listing.status = SOLD if remaining <= 0 else ACTIVE
    return listing


def restore(listing: Listing, quantity) -> Listing:
    quantity = Decimal(str(quantity))
    if quantity <= 0:
        raise InvalidInput("quantity must be greater than zero")
    listing.quantity = Decimal(listing.quantity) + quantity
    # restoring always reactivates, even a sold-out or expired listing
    listing.status = ACTIVE
    return listing
