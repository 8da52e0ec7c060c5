# smartbazaar/crud.py
"""Read-side queries and simple writes for users, listings and orders.

Anything that moves stock or order status goes through `services.OrderService`
instead; the helpers here never touch `Listing.quantity` or `Order.status`.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import and_, or_, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from typing import Dict, Any, Optional

from .exceptions import InvalidInput, NotFound, TransactionConflict, Unauthorized
from .identity import Actor, FARMER, BUYER
from .ledger import ACTIVE, EXPIRED
from .models import Bookmark, Listing, Order, User
from .orders import DELIVERED, HISTORY_STATUSES, ONGOING_STATUSES, ORDER_STATUSES
from .utils import logger, new_id

def upsert_user(db: Session, actor: Actor, data: Dict[str, Any]) -> User:
    if actor.role not in (FARMER, BUYER):
        raise InvalidInput("profiles can only be created for farmers and buyers")
    obj = db.get(User, actor.user_id)
    if obj is None:
        obj = User(uid=actor.user_id, role=actor.role)
        db.add(obj)
    obj.role = actor.role
    for k, v in data.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj

def get_user(db: Session, uid: str) -> Optional[User]:
    return db.get(User, uid)

def create_listing(db: Session, actor: Actor, data: Dict[str, Any]) -> Listing:
    if actor.role != FARMER:
        raise Unauthorized("only farmers can create listings")
    if db.get(User, actor.user_id) is None:
        raise NotFound(f"user {actor.user_id} not found")
    quantity = Decimal(str(data.get("quantity") or 0))
    price = Decimal(str(data.get("price_per_unit") or 0))
    if quantity <= 0 or price <= 0:
        raise InvalidInput("quantity and price_per_unit must be greater than zero")
    if quantity.as_tuple().exponent < -3 or price.as_tuple().exponent < -2:
        raise InvalidInput("quantity allows 3 decimal places and price_per_unit allows 2")
    obj = Listing(id=new_id(), farmer_id=actor.user_id, status=ACTIVE, **data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info("Listing %s created by %s", obj.id, actor.user_id)
    return obj

def get_listing(db: Session, listing_id: str) -> Optional[Listing]:
    return db.get(Listing, listing_id)

def list_listings(db: Session, skip: int = 0, limit: int = 50, filters: Dict = None):
    q = db.query(Listing).filter(Listing.status == ACTIVE)
    if filters:
        conds = []
        if filters.get("category") and filters["category"] != "all":
            conds.append(Listing.category.ilike(filters["category"]))
        if filters.get("location") and filters["location"] != "all":
            conds.append(Listing.location.ilike(f"%{filters['location']}%"))
        if filters.get("min_price") is not None:
            conds.append(Listing.price_per_unit >= filters["min_price"])
        if filters.get("max_price") is not None:
            conds.append(Listing.price_per_unit <= filters["max_price"])
        if filters.get("keyword"):
            kw = f"%{filters['keyword']}%"
            conds.append(or_(Listing.crop_name.ilike(kw), Listing.description.ilike(kw)))
        if conds:
            q = q.filter(and_(*conds))
    total = q.count()
    items = q.order_by(Listing.created_at.desc()).offset(skip).limit(limit).all()
    return {"total": total, "items": items}

def farmer_listings(db: Session, farmer_id: str):
    return (
        db.query(Listing)
        .filter(Listing.farmer_id == farmer_id, Listing.status == ACTIVE)
        .order_by(Listing.created_at.desc())
        .all()
    )

def withdraw_listing(db: Session, actor: Actor, listing_id: str) -> Listing:
    # listings are never deleted; withdrawing marks them expired
    obj = db.get(Listing, listing_id)
    if obj is None:
        raise NotFound(f"listing {listing_id} not found")
    if obj.farmer_id != actor.user_id:
        raise Unauthorized("only the owner can withdraw a listing")
    obj.status = EXPIRED
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        raise TransactionConflict("the listing was updated by someone else, please try again") from e
    db.refresh(obj)
    return obj

def expire_stale_listings(db: Session, older_than: datetime) -> int:
    stmt = (
        update(Listing)
        .where(Listing.status == ACTIVE, Listing.created_at < older_than)
        # bump the version so in-flight placements against these rows conflict
        .values(status=EXPIRED, version=Listing.version + 1)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    db.commit()
    return res.rowcount

def add_bookmark(db: Session, actor: Actor, listing_id: str) -> Bookmark:
    if db.get(User, actor.user_id) is None:
        raise NotFound(f"user {actor.user_id} not found")
    if db.get(Listing, listing_id) is None:
        raise NotFound(f"listing {listing_id} not found")
    existing = (
        db.query(Bookmark)
        .filter(Bookmark.user_id == actor.user_id, Bookmark.listing_id == listing_id)
        .first()
    )
    if existing:
        return existing
    obj = Bookmark(id=new_id(), user_id=actor.user_id, listing_id=listing_id)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def remove_bookmark(db: Session, actor: Actor, listing_id: str) -> bool:
    deleted = (
        db.query(Bookmark)
        .filter(Bookmark.user_id == actor.user_id, Bookmark.listing_id == listing_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0

def list_bookmarks(db: Session, user_id: str):
    # saved listings of any status, so a sold-out favourite still shows up
    return (
        db.query(Listing)
        .join(Bookmark, Bookmark.listing_id == Listing.id)
        .filter(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc())
        .all()
    )

def farmer_orders(db: Session, farmer_id: str, status: Optional[str] = None):
    q = db.query(Order).filter(Order.farmer_id == farmer_id)
    if status:
        if status not in ORDER_STATUSES:
            raise InvalidInput(f"unknown order status {status!r}")
        q = q.filter(Order.status == status)
    return q.order_by(Order.created_at.desc()).all()

def buyer_purchases(db: Session, buyer_id: str, scope: str = "ongoing"):
    if scope == "ongoing":
        statuses = ONGOING_STATUSES
    elif scope == "history":
        statuses = HISTORY_STATUSES
    else:
        raise InvalidInput("scope must be 'ongoing' or 'history'")
    return (
        db.query(Order)
        .filter(Order.buyer_id == buyer_id, Order.status.in_(statuses))
        .order_by(Order.created_at.desc())
        .all()
    )

def sales_history(db: Session, farmer_id: str):
    items = farmer_orders(db, farmer_id, status=DELIVERED)
    zero = Decimal("0")
    return {
        "orders": items,
        "total_subtotal": sum((Decimal(o.subtotal) for o in items), zero),
        "total_commission": sum((Decimal(o.commission) for o in items), zero),
        "total_farmer_earning": sum((Decimal(o.farmer_earning) for o in items), zero),
    }
