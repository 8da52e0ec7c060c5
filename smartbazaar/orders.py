# smartbazaar/orders.py
"""Order status state machine.

    pending ──► accepted ──► dispatched ──► in_warehouse ──► out_for_delivery ──► delivered
       │            │
       ▼            ▼
    rejected    cancelled

`rejected`, `cancelled` and `delivered` are terminal. Every edge except
`cancelled` belongs to the order's farmer; `cancelled` belongs to the buyer
(or the system). `apply_transition` runs inside a caller-owned session and
leaves the commit to the caller.
"""
from sqlalchemy.orm import Session

from . import ledger
from .exceptions import IllegalTransition, InvalidInput, NotFound, Unauthorized
from .identity import Actor
from .models import Listing, Order, OrderEvent
from .notifications import notify, ORDER_UPDATE
from .utils import logger

PENDING = "pending"
ACCEPTED = "accepted"
REJECTED = "rejected"
DISPATCHED = "dispatched"
IN_WAREHOUSE = "in_warehouse"
OUT_FOR_DELIVERY = "out_for_delivery"
DELIVERED = "delivered"
CANCELLED = "cancelled"

ORDER_STATUSES = (
    PENDING, ACCEPTED, REJECTED, DISPATCHED, IN_WAREHOUSE, OUT_FOR_DELIVERY, DELIVERED, CANCELLED,
)

ALLOWED_TRANSITIONS = {
    PENDING: frozenset({ACCEPTED, REJECTED}),
    ACCEPTED: frozenset({DISPATCHED, CANCELLED}),
    DISPATCHED: frozenset({IN_WAREHOUSE}),
    IN_WAREHOUSE: frozenset({OUT_FOR_DELIVERY}),
    OUT_FOR_DELIVERY: frozenset({DELIVERED}),
    REJECTED: frozenset(),
    CANCELLED: frozenset(),
    DELIVERED: frozenset(),
}

FARMER_EDGES = frozenset({ACCEPTED, REJECTED, DISPATCHED, IN_WAREHOUSE, OUT_FOR_DELIVERY, DELIVERED})

ONGOING_STATUSES = (PENDING, ACCEPTED, DISPATCHED, IN_WAREHOUSE, OUT_FOR_DELIVERY)
HISTORY_STATUSES = (DELIVERED, CANCELLED, REJECTED)


def status_label(status: str) -> str:
    return status.replace("_", " ")


def is_terminal(status: str) -> bool:
    return not ALLOWED_TRANSITIONS.get(status)


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def _deny(actor: Actor, order: Order, target: str, reason: str):
    logger.warning(
        "Unauthorized transition attempt: actor=%s role=%s order=%s %s->%s (%s)",
        actor.user_id, actor.role, order.id, order.status, target, reason,
    )
    raise Unauthorized(reason)


def authorize(order: Order, target: str, actor: Actor) -> None:
    if target in FARMER_EDGES:
        if actor.user_id != order.farmer_id:
            _deny(actor, order, target, "only the farmer of this order can do that")
    elif target == CANCELLED:
        if not actor.is_system and actor.user_id != order.buyer_id:
            _deny(actor, order, target, "only the buyer of this order can cancel it")


def _notify_counterparties(db: Session, order: Order, target: str, actor: Actor) -> None:
    label = status_label(target)
    if actor.is_system or actor.user_id == order.farmer_id:
        notify(
            db,
            order.buyer_id,
            ORDER_UPDATE,
            f"Order Status: {label}",
            f"Your order for {order.crop_name} has been updated.",
            "/my-purchases",
        )
    if actor.is_system or actor.user_id == order.buyer_id:
        notify(
            db,
            order.farmer_id,
            ORDER_UPDATE,
            f"Order Status: {label}",
            f"The order for {order.crop_name} from {order.buyer_name or 'a buyer'} is now {label}.",
            "/orders",
        )


def apply_transition(db: Session, order: Order, target: str, actor: Actor) -> Order:
    if target not in ORDER_STATUSES:
        raise InvalidInput(f"unknown order status {target!r}")
    if not actor.is_system and actor.user_id not in (order.farmer_id, order.buyer_id):
        _deny(actor, order, target, "not a party to this order")
    if not can_transition(order.status, target):
        raise IllegalTransition(f"cannot move an order from {status_label(order.status)} to {status_label(target)}")
    authorize(order, target, actor)

    if target == REJECTED:
        if order.stock_restored:
            raise IllegalTransition("stock for this order was already restored")
        listing = db.get(Listing, order.listing_id)
        if listing is None:
            raise NotFound(f"listing {order.listing_id} not found")
        ledger.restore(listing, order.quantity)
        order.stock_restored = True

    previous = order.status
    order.status = target
    order.history.append(OrderEvent(status=target, actor_id=actor.user_id))
    _notify_counterparties(db, order, target, actor)
    logger.info("Order %s moved %s -> %s by %s", order.id, previous, target, actor.user_id)
    return order
