# smartbazaar/services.py
"""Order placement and status changes as atomic units of work.

`OrderService` composes pricing, the stock ledger, the state machine and the
notification emitter. Each public method runs as one transaction through
`TransactionRunner`: either every row it touches is written or none are.
"""
from decimal import Decimal, InvalidOperation
from sqlalchemy.orm import Session

from . import config, ledger, schemas
from .exceptions import InvalidInput, NotFound, Unauthorized
from .identity import Actor
from .models import Listing, Order, OrderEvent, User
from .notifications import notify, NEW_ORDER
from .orders import PENDING, apply_transition
from .pricing import compute_pricing
from .transactions import TransactionRunner
from .utils import format_quantity, logger, new_id

# matches the scale of the quantity columns
QUANTITY_PLACES = 3


def _require(db: Session, model, key, label: str):
    obj = db.get(model, key)
    if obj is None:
        raise NotFound(f"{label} {key} not found")
    return obj


class OrderService:
    def __init__(self, session_factory, delivery_charge=config.DELIVERY_CHARGE,
                 commission_rate=config.COMMISSION_RATE, runner: TransactionRunner = None):
        self.session_factory = session_factory
        self.delivery_charge = Decimal(str(delivery_charge))
        self.commission_rate = Decimal(str(commission_rate))
        self.runner = runner or TransactionRunner(session_factory)

    def place_order(self, actor: Actor, listing_id: str, quantity) -> schemas.OrderOut:
        try:
            quantity = Decimal(str(quantity))
        except (InvalidOperation, ValueError):
            raise InvalidInput("quantity must be a number")
        if not quantity.is_finite() or quantity <= 0:
            raise InvalidInput("quantity must be greater than zero")
        if quantity.as_tuple().exponent < -QUANTITY_PLACES:
            raise InvalidInput(f"quantity can have at most {QUANTITY_PLACES} decimal places")

        def work(db: Session) -> schemas.OrderOut:
            listing = _require(db, Listing, listing_id, "listing")
            if listing.farmer_id == actor.user_id:
                raise Unauthorized("you cannot buy your own listing")
            buyer = _require(db, User, actor.user_id, "user")
            farmer = _require(db, User, listing.farmer_id, "user")

            pricing = compute_pricing(listing.price_per_unit, quantity, self.delivery_charge, self.commission_rate)
            ledger.reserve(listing, quantity)

            order = Order(
                id=new_id(),
                listing_id=listing.id,
                buyer_id=buyer.uid,
                farmer_id=farmer.uid,
                crop_name=listing.crop_name,
                quantity=quantity,
                unit=listing.unit,
                price_per_unit=listing.price_per_unit,
                subtotal=pricing.subtotal,
                delivery_charge=pricing.delivery_charge,
                commission=pricing.commission,
                farmer_earning=pricing.farmer_earning,
                total_price=pricing.total_price,
                farmer_name=farmer.display_name,
                farmer_avatar_url=farmer.photo_url or "",
                buyer_name=buyer.display_name,
                buyer_avatar_url=buyer.photo_url or "",
                status=PENDING,
                stock_restored=False,
            )
            order.history.append(OrderEvent(status=PENDING, actor_id=buyer.uid))
            db.add(order)

            notify(
                db,
                farmer.uid,
                NEW_ORDER,
                "New Order Received!",
                f"{buyer.first_name or 'A buyer'} placed an order for "
                f"{format_quantity(quantity)} {listing.unit} of {listing.crop_name}.",
                "/orders",
            )
            db.flush()
            return schemas.OrderOut.model_validate(order)

        out = self.runner.run(work)
        logger.info("Order %s placed by %s for %s %s of listing %s",
                    out.id, actor.user_id, format_quantity(quantity), out.unit, listing_id)
        return out

    def transition(self, actor: Actor, order_id: str, target: str) -> schemas.OrderOut:
        target = (target or "").strip().lower()

        def work(db: Session) -> schemas.OrderOut:
            order = _require(db, Order, order_id, "order")
            apply_transition(db, order, target, actor)
            db.flush()
            return schemas.OrderOut.model_validate(order)

        return self.runner.run(work)

    def get_order(self, actor: Actor, order_id: str) -> schemas.OrderOut:
        db = self.session_factory()
        try:
            order = _require(db, Order, order_id, "order")
            if not actor.is_system and actor.user_id not in (order.buyer_id, order.farmer_id):
                raise Unauthorized("not a party to this order")
            return schemas.OrderOut.model_validate(order)
        finally:
            db.close()
